"""Rule model loader — validates a configuration document and compiles it.

All validation happens here, once. A configuration problem is reported as a
ConfigError at load time and can never show up later as an Undetermined
verdict. The compiled RuleModel carries precomputed dependency maps so the
tracker never has to walk the configuration again.

Reference shape (JSON):
    {
      "programs":  [{"id", "name", "criteria_logic": "AND"|"OR", "criteria_ids": [...]}],
      "criteria":  [{"id", "comparison", "threshold" | "threshold_by_<var>" | "options"}],
      "questions": [{"question", "type", "options", "variable", "criteria_impact": [...]}],
      "criteria_groups": [{"id", "type", "criteria_ids": [...]}]   # optional
    }
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from screener.config import settings
from screener.errors import ConfigError
from screener.rules.model import (
    CriteriaImpact,
    CriteriaTree,
    Criterion,
    CriterionNode,
    GroupNode,
    OptionCriterion,
    Program,
    Question,
    RuleModel,
    ThresholdCriterion,
    VariableThresholdCriterion,
)
from screener.rules.values import index_key, to_decimal
from screener.schemas.config import (
    THRESHOLD_TABLE_PREFIX,
    ConfigDocument,
    CriterionSpec,
    GroupSpec,
    ProgramSpec,
    QuestionSpec,
)
from screener.schemas.enums import Combinator, Comparison, GroupKind, InputKind

logger = logging.getLogger(__name__)

# Configured question types → input kind. Widget names are accepted as aliases.
QUESTION_KINDS: dict[str, InputKind] = {
    "boolean": InputKind.BOOLEAN,
    "bool": InputKind.BOOLEAN,
    "number": InputKind.NUMBER,
    "numeric": InputKind.NUMBER,
    "integer": InputKind.NUMBER,
    "single_choice": InputKind.SINGLE_CHOICE,
    "dropdown": InputKind.SINGLE_CHOICE,
    "radio": InputKind.SINGLE_CHOICE,
    "radiogroup": InputKind.SINGLE_CHOICE,
    "multi_choice": InputKind.MULTI_CHOICE,
    "checkbox": InputKind.MULTI_CHOICE,
}

DEFAULT_BOOLEAN_CHOICES: tuple[str, str] = ("Yes", "No")

# A radio widget without configured options offers the yes/no pair.
RADIO_INPUT = "radio"


def _config_error(message: str) -> ConfigError:
    logger.warning("Configuration rejected: %s", message)
    return ConfigError(message)


def _index_unique(items: Iterable[Any], key: str, label: str) -> dict[str, Any]:
    """Index specs by id, rejecting duplicates."""
    indexed: dict[str, Any] = {}
    for item in items:
        item_id = getattr(item, key)
        if item_id in indexed:
            raise _config_error(f"Duplicate {label} id: {item_id!r}")
        indexed[item_id] = item
    return indexed


def _tree_height(node: CriteriaTree) -> int:
    """Levels below ``node``: 0 for a criterion, 1 + deepest child for a group."""
    if isinstance(node, CriterionNode):
        return 0
    return 1 + max(_tree_height(child) for child in node.children)


class _ModelBuilder:
    """Single-use compiler from ConfigDocument to RuleModel."""

    def __init__(self, document: ConfigDocument, max_group_depth: int) -> None:
        self.document = document
        self.max_group_depth = max_group_depth

        self.program_specs: dict[str, ProgramSpec] = _index_unique(document.programs, "id", "program")
        self.criterion_specs: dict[str, CriterionSpec] = _index_unique(document.criteria, "id", "criterion")
        self.question_specs: dict[str, QuestionSpec] = _index_unique(document.questions, "question", "question")

        for group in document.criteria_groups:
            if not group.id:
                raise _config_error("Every entry of criteria_groups needs an id")
        self.group_specs: dict[str, GroupSpec] = _index_unique(document.criteria_groups, "id", "criteria group")

        clashing = sorted(set(self.group_specs) & set(self.criterion_specs))
        if clashing:
            raise _config_error(f"Ids used for both a criterion and a criteria group: {clashing}")

        self.questions: dict[str, Question] = {}
        self.variables: dict[str, str] = {}         # variable name -> question id
        self.criterion_sources: dict[str, str] = {}  # criterion id -> question id
        self.criteria: dict[str, Criterion] = {}
        self.named_groups: dict[str, tuple[GroupNode, int]] = {}  # group id -> (node, height)

    # ── Build steps ──────────────────────────────────────────────────

    def build(self) -> RuleModel:
        if not self.program_specs:
            raise _config_error("Configuration defines no programs")

        self._build_questions()
        self._bind_criteria()
        self._compile_criteria()
        programs = {spec.id: self._build_program(spec) for spec in self.program_specs.values()}
        dependencies = self._program_dependencies(programs)

        question_programs: dict[str, set[str]] = {qid: set() for qid in self.questions}
        for program_id, question_ids in dependencies.items():
            for question_id in question_ids:
                question_programs[question_id].add(program_id)

        return RuleModel(
            programs=MappingProxyType(programs),
            criteria=MappingProxyType(dict(self.criteria)),
            questions=MappingProxyType(dict(self.questions)),
            program_dependencies=MappingProxyType(dependencies),
            question_programs=MappingProxyType(
                {qid: frozenset(pids) for qid, pids in question_programs.items()}
            ),
            title=self.document.title,
            description=self.document.description,
        )

    def _build_questions(self) -> None:
        for position, spec in enumerate(self.question_specs.values()):
            kind = QUESTION_KINDS.get(spec.type.strip().lower())
            if kind is None:
                raise _config_error(
                    f"Question {spec.question!r} has unsupported type {spec.type!r} "
                    f"(valid: {sorted(QUESTION_KINDS)})"
                )

            choices: tuple[Any, ...] | None = tuple(spec.options) if spec.options else None
            radio = RADIO_INPUT in {(spec.input_type or "").strip().lower(), spec.type.strip().lower()}
            if kind == InputKind.NUMBER:
                choices = None
            elif choices is None and (kind == InputKind.BOOLEAN or radio):
                choices = DEFAULT_BOOLEAN_CHOICES

            impacts = []
            for link in spec.criteria_impact:
                if link.criteria_id not in self.criterion_specs:
                    raise _config_error(
                        f"Question {spec.question!r} impacts unknown criterion {link.criteria_id!r}"
                    )
                if link.program_id not in self.program_specs:
                    raise _config_error(
                        f"Question {spec.question!r} impacts unknown program {link.program_id!r}"
                    )
                impacts.append(CriteriaImpact(criteria_id=link.criteria_id, program_id=link.program_id))

            if spec.variable:
                if spec.variable in self.variables:
                    raise _config_error(
                        f"Variable {spec.variable!r} is declared by both "
                        f"{self.variables[spec.variable]!r} and {spec.question!r}"
                    )
                self.variables[spec.variable] = spec.question

            self.questions[spec.question] = Question(
                id=spec.question,
                kind=kind,
                choices=choices,
                variable=spec.variable,
                criteria_impact=tuple(impacts),
                position=position,
            )

    def _bind_criteria(self) -> None:
        """Bind each criterion to the single question whose answer it tests.

        The index question of a variable-indexed criterion may also list it in
        criteria_impact; it is not a competing source.
        """
        claimants: dict[str, list[str]] = {}
        for question in self.questions.values():
            for link in question.criteria_impact:
                claimed = claimants.setdefault(link.criteria_id, [])
                if question.id not in claimed:
                    claimed.append(question.id)

        for criterion_id, question_ids in claimants.items():
            if len(question_ids) > 1:
                index_ids = {
                    self._index_question_for(variable)
                    for variable in self.criterion_specs[criterion_id].threshold_tables
                }
                question_ids = [qid for qid in question_ids if qid not in index_ids]
            if len(question_ids) != 1:
                raise _config_error(
                    f"Criterion {criterion_id!r} is claimed by several questions: {question_ids}"
                )
            self.criterion_sources[criterion_id] = question_ids[0]

    def _index_question_for(self, variable: str) -> str | None:
        """Question answering ``variable``: declared by name, else by question id."""
        if variable in self.variables:
            return self.variables[variable]
        return variable if variable in self.questions else None

    def _compile_criteria(self) -> None:
        for criterion_id, spec in self.criterion_specs.items():
            question_id = self.criterion_sources.get(criterion_id)
            if question_id is None:
                # Referencing it from a program is an error, reported there.
                logger.debug("Criterion %s has no source question", criterion_id)
                continue
            self.criteria[criterion_id] = self._compile_criterion(spec, self.questions[question_id])

    def _compile_criterion(self, spec: CriterionSpec, question: Question) -> Criterion:
        tables = spec.threshold_tables
        shapes = [spec.threshold is not None, bool(tables), spec.options is not None]
        if sum(shapes) != 1:
            raise _config_error(
                f"Criterion {spec.id!r} must define exactly one of 'threshold', "
                f"'{THRESHOLD_TABLE_PREFIX}<variable>' or 'options'"
            )

        if spec.options is not None:
            return OptionCriterion(
                id=spec.id,
                question_id=question.id,
                options=self._normalize_options(spec, question),
            )

        comparison = self._parse_comparison(spec)
        if question.kind != InputKind.NUMBER:
            raise _config_error(
                f"Threshold criterion {spec.id!r} is bound to non-numeric question {question.id!r}"
            )

        if spec.threshold is not None:
            if not spec.threshold.is_finite():
                raise _config_error(f"Criterion {spec.id!r} threshold must be a finite number")
            return ThresholdCriterion(
                id=spec.id,
                question_id=question.id,
                comparison=comparison,
                bound=spec.threshold,
            )

        if len(tables) > 1:
            raise _config_error(
                f"Criterion {spec.id!r} has more than one threshold table: {sorted(tables)}"
            )
        variable, raw_table = next(iter(tables.items()))
        index_question_id = self._index_question_for(variable)
        if index_question_id is None:
            raise _config_error(
                f"Criterion {spec.id!r} is indexed by variable {variable!r}, "
                "but no question declares it"
            )
        if index_question_id == question.id:
            raise _config_error(
                f"Criterion {spec.id!r} is only linked to its index question {question.id!r}"
            )
        if not isinstance(raw_table, Mapping) or not raw_table:
            raise _config_error(
                f"Criterion {spec.id!r}: '{THRESHOLD_TABLE_PREFIX}{variable}' must be a non-empty mapping"
            )

        table: dict[Any, Any] = {}
        for raw_key, raw_bound in raw_table.items():
            bound = to_decimal(raw_bound)
            if bound is None:
                raise _config_error(
                    f"Criterion {spec.id!r}: bound for {variable}={raw_key!r} is not a number"
                )
            table[index_key(raw_key)] = bound

        return VariableThresholdCriterion(
            id=spec.id,
            question_id=question.id,
            comparison=comparison,
            variable=variable,
            index_question_id=index_question_id,
            table=MappingProxyType(table),
        )

    @staticmethod
    def _parse_comparison(spec: CriterionSpec) -> Comparison:
        try:
            return Comparison((spec.comparison or "").strip())
        except ValueError:
            raise _config_error(
                f"Criterion {spec.id!r} has unsupported comparison {spec.comparison!r} "
                f"(valid: {[c.value for c in Comparison]})"
            ) from None

    @staticmethod
    def _normalize_options(spec: CriterionSpec, question: Question) -> tuple[Any, ...]:
        options = spec.options or []
        if not options:
            raise _config_error(f"Criterion {spec.id!r} has an empty options list")

        if question.kind == InputKind.NUMBER:
            numbers = [to_decimal(option) for option in options]
            if any(n is None for n in numbers):
                raise _config_error(
                    f"Criterion {spec.id!r} lists non-numeric options for numeric question {question.id!r}"
                )
            return tuple(numbers)

        choices = question.choices
        if question.kind == InputKind.BOOLEAN and choices is not None and len(choices) >= 2:
            # true/false name the question's own yes/no labels, as answers do
            options = [(choices[0] if o else choices[1]) if isinstance(o, bool) else o for o in options]

        if choices is not None:
            unknown = [option for option in options if option not in choices]
            if unknown:
                raise _config_error(
                    f"Criterion {spec.id!r} lists options {unknown} that question "
                    f"{question.id!r} does not offer (choices: {list(choices)})"
                )
        return tuple(options)

    # ── Criteria trees ───────────────────────────────────────────────

    def _resolve(self, ref: str | GroupSpec, path: tuple[str, ...], depth: int, owner: str) -> CriteriaTree:
        """Resolve a criteria reference into a tree node.

        ``path`` holds the named groups currently being expanded; meeting one
        of them again means the configuration is cyclic.
        """
        if depth > self.max_group_depth:
            raise _config_error(
                f"Criteria of {owner!r} nest deeper than {self.max_group_depth} levels "
                "(cyclic or runaway group references)"
            )

        if isinstance(ref, GroupSpec):
            return self._build_group(ref, path, depth, owner)

        if ref in self.criterion_specs:
            criterion = self.criteria.get(ref)
            if criterion is None:
                raise _config_error(
                    f"Criterion {ref!r} used by {owner!r} is not bound to any question "
                    "(no criteria_impact lists it)"
                )
            return CriterionNode(criterion=criterion)

        if ref in self.group_specs:
            if ref in path:
                cycle = " -> ".join((*path, ref))
                raise _config_error(f"Criteria groups form a cycle: {cycle}")
            cached = self.named_groups.get(ref)
            if cached is None:
                node = self._build_group(self.group_specs[ref], (*path, ref), depth, owner)
                cached = self.named_groups[ref] = (node, _tree_height(node))
            node, height = cached
            # A reused group sits at a new depth; its subtree must still fit.
            if depth + height > self.max_group_depth:
                raise _config_error(
                    f"Criteria of {owner!r} nest deeper than {self.max_group_depth} levels "
                    f"(group {ref!r} is {height} levels deep)"
                )
            return node

        raise _config_error(f"{owner!r} references unknown criterion or group {ref!r}")

    def _build_group(self, spec: GroupSpec, path: tuple[str, ...], depth: int, owner: str) -> GroupNode:
        try:
            kind = GroupKind(spec.type.strip().lower())
        except ValueError:
            raise _config_error(
                f"Criteria group in {owner!r} has unsupported type {spec.type!r} "
                f"(valid: {[k.value for k in GroupKind]})"
            ) from None
        if not spec.criteria_ids:
            raise _config_error(f"Criteria group {spec.id or spec.type!r} in {owner!r} has no children")

        children = tuple(self._resolve(child, path, depth + 1, owner) for child in spec.criteria_ids)
        return GroupNode(kind=kind, children=children, id=spec.id)

    def _build_program(self, spec: ProgramSpec) -> Program:
        try:
            combinator = Combinator(spec.criteria_logic.strip().upper())
        except ValueError:
            raise _config_error(
                f"Program {spec.id!r} has unsupported criteria_logic {spec.criteria_logic!r}"
            ) from None
        if not spec.criteria_ids:
            raise _config_error(f"Program {spec.id!r} has no criteria")

        groups = tuple(self._resolve(ref, (), 1, spec.id) for ref in spec.criteria_ids)
        return Program(
            id=spec.id,
            name=spec.name or spec.id,
            combinator=combinator,
            groups=groups,
            estimated_savings=str(spec.estimated_savings) if spec.estimated_savings is not None else None,
            application_link=spec.application_link,
            description=spec.description,
        )

    def _program_dependencies(self, programs: dict[str, Program]) -> dict[str, frozenset[str]]:
        """Questions each program depends on: its tree's source and index
        questions plus every question that declares an impact on it."""
        dependencies: dict[str, set[str]] = {pid: set() for pid in programs}
        for program in programs.values():
            for criterion in program.criteria():
                dependencies[program.id].update(criterion.question_ids)
        for question in self.questions.values():
            for link in question.criteria_impact:
                dependencies[link.program_id].add(question.id)
        return {pid: frozenset(qids) for pid, qids in dependencies.items()}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_model(
    config: Mapping[str, Any] | ConfigDocument,
    *,
    max_group_depth: int | None = None,
) -> RuleModel:
    """Validate a configuration document and compile it into a RuleModel.

    Args:
        config: Parsed JSON document (mapping) or an already validated ConfigDocument.
        max_group_depth: Deepest allowed group nesting. Defaults to settings.max_group_depth.

    Returns:
        The immutable RuleModel.

    Raises:
        ConfigError: If the document is malformed or inconsistent.
    """
    if isinstance(config, ConfigDocument):
        document = config
    elif isinstance(config, Mapping):
        try:
            document = ConfigDocument.model_validate(dict(config))
        except ValidationError as exc:
            msg = f"Invalid configuration document ({exc.error_count()} error(s)):\n{exc}"
            raise _config_error(msg) from exc
    else:
        msg = f"Configuration must be a mapping, got {type(config).__name__}"
        raise _config_error(msg)

    depth = settings.max_group_depth if max_group_depth is None else max_group_depth
    model = _ModelBuilder(document, max_group_depth=depth).build()

    logger.info(
        "Rule model loaded: %d programs, %d criteria, %d questions",
        len(model.programs),
        len(model.criteria),
        len(model.questions),
    )
    return model


def load_model_file(path: str | Path, **kwargs: Any) -> RuleModel:
    """Load a RuleModel from a JSON file.

    Raises:
        ConfigError: If the file cannot be read, is not JSON, or fails validation.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except OSError as exc:
        msg = f"Cannot read configuration file {path}: {exc}"
        raise _config_error(msg) from exc
    except json.JSONDecodeError as exc:
        msg = f"Configuration file {path} is not valid JSON: {exc}"
        raise _config_error(msg) from exc

    logger.debug("Loading rule configuration from %s", path)
    return load_model(raw, **kwargs)


@lru_cache(maxsize=1)
def load_default_model() -> RuleModel:
    """Load (once) the configuration at settings.config_path."""
    return load_model_file(settings.config_path)
