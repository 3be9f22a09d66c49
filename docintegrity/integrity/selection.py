"""Selection expansion to complete conceptual units."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from docintegrity.hierarchy.analyzer import DocumentHierarchyAnalysis
from docintegrity.hierarchy.units import ConceptualUnit, ConceptualUnitAnalysis
from docintegrity.integrity.issues import IntegrityIssue, IssueCode


@dataclass
class ExpansionResult:
    """
    A selection grown to whole units.

    ``expanded_block_ids`` keeps the original selection first, followed by
    the added blocks in the order they were pulled in.
    """

    expanded_block_ids: list[str] = field(default_factory=list)
    added_block_ids: list[str] = field(default_factory=list)
    units_included: list[ConceptualUnit] = field(default_factory=list)
    notes: list[IntegrityIssue] = field(default_factory=list)

    @property
    def expansion_warnings(self) -> list[str]:
        return [note.message for note in self.notes]

    @property
    def was_expanded(self) -> bool:
        return bool(self.added_block_ids)

    def to_dict(self) -> dict[str, Any]:
        return {
            "expanded_block_ids": self.expanded_block_ids,
            "added_block_ids": self.added_block_ids,
            "units_included": [unit.to_dict() for unit in self.units_included],
            "expansion_warnings": self.expansion_warnings,
        }


class SelectionExpander:
    """
    Grows partial selections so they cover complete conceptual units.

    Expansion only ever adds blocks, so expanding an already expanded
    selection changes nothing.
    """

    @staticmethod
    def expand(
        target_block_ids: Iterable[str],
        analysis: DocumentHierarchyAnalysis | ConceptualUnitAnalysis,
        include_related_units: bool = False,
        warn_on_expansion: bool = False,
    ) -> ExpansionResult:
        """
        Expand a selection to the units it touches.

        Args:
            target_block_ids: The caller's selection.
            analysis: Hierarchy or conceptual unit analysis of the document.
            include_related_units: Also pull in child units, transitively.
            warn_on_expansion: Record a note for every unit that grew the
                selection.
        """
        units = (
            analysis.conceptual_units
            if isinstance(analysis, DocumentHierarchyAnalysis)
            else analysis
        )
        targets = list(dict.fromkeys(target_block_ids))
        expanded: dict[str, None] = dict.fromkeys(targets)
        result = ExpansionResult()
        included: set[str] = set()

        def include(unit: ConceptualUnit) -> bool:
            grew = False
            for block_id in unit.block_ids:
                if block_id not in expanded:
                    expanded[block_id] = None
                    result.added_block_ids.append(block_id)
                    grew = True
            if unit.unit_id not in included:
                included.add(unit.unit_id)
                result.units_included.append(unit)
            return grew

        for block_id in targets:
            unit = units.find_unit_for_block(block_id)
            if unit is None:
                continue
            if include(unit) and warn_on_expansion:
                result.notes.append(
                    IntegrityIssue.create(
                        IssueCode.UNIT_EXPANDED,
                        f"Expanded selection to include complete {unit.type.value} "
                        f"unit ({unit.size} blocks total)",
                        block_ids=unit.block_ids,
                        unit_id=unit.unit_id,
                    )
                )

        if include_related_units:
            # units_included grows while we walk it, so child units of child
            # units are reached too
            index = 0
            while index < len(result.units_included):
                parent = result.units_included[index]
                index += 1
                for child in units.child_units(parent.unit_id):
                    if include(child) and warn_on_expansion:
                        result.notes.append(
                            IntegrityIssue.create(
                                IssueCode.RELATED_UNIT_INCLUDED,
                                f"Included related child unit: {child.type.value}",
                                block_ids=child.block_ids,
                                unit_id=child.unit_id,
                            )
                        )

        result.expanded_block_ids = list(expanded)
        return result


def expand_selection_to_complete_units(
    target_block_ids: Iterable[str],
    analysis: DocumentHierarchyAnalysis | ConceptualUnitAnalysis,
    include_related_units: bool = False,
    warn_on_expansion: bool = False,
) -> ExpansionResult:
    """Module-level shortcut for ``SelectionExpander.expand``."""
    return SelectionExpander.expand(
        target_block_ids,
        analysis,
        include_related_units=include_related_units,
        warn_on_expansion=warn_on_expansion,
    )
