"""
Invalid-value filter node.

Drops rows whose quantitative/temporal fields are null, NaN or non-finite before
they reach scales or marks that cannot display them. Which fields need guarding
is decided per scale channel by the invalid-data policy (see chartc.compile.invalid).

Examples:
    >>> from chartc.compile.model import UnitModel
    >>> from chartc.compile.invalid import get_data_sources_for_handling_invalid_values
    >>> model = UnitModel({"mark": "point", "encoding": {"y": "value:Q"}})
    >>> sources = get_data_sources_for_handling_invalid_values("filter", is_path=False)
    >>> node = FilterInvalidNode.make(None, model, sources)
    >>> node.assemble()
    {'type': 'filter', 'expr': 'isValid(datum["value"]) && isFinite(+datum["value"])'}
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from chartc.channeldef import FieldDef, vg_field
from chartc.compile.data.dataflow import DataflowNode
from chartc.compile.invalid import DataSourcesForHandlingInvalidValues, get_scale_invalid_data_mode
from chartc.core import messages
from chartc.core.errors import InvariantViolation
from chartc.core.grammar import (
    FieldType,
    ScaleInvalidDataMode,
    is_counting_aggregate_op,
    is_scale_channel,
)
from chartc.core.hashing import hash_spec
from chartc.core.typing import JsonDict
from chartc.expr import is_valid_finite_number_expr

if TYPE_CHECKING:
    from chartc.compile.model import UnitModel

__all__ = ["FilterInvalidNode"]

logger = logging.getLogger(__name__)

_PASS_THROUGH_MODES = (ScaleInvalidDataMode.SHOW, ScaleInvalidDataMode.ALWAYS_VALID)


class FilterInvalidNode(DataflowNode):
    """
    Filter rows with invalid values in any of the guarded fields.

    Attributes:
        filter (dict[str, FieldDef]): Guarded field name -> its field def.
    """

    def __init__(self, parent: DataflowNode | None, filter: dict[str, FieldDef]):
        super().__init__(parent)
        self.filter = filter

    def clone(self) -> FilterInvalidNode:
        return FilterInvalidNode(None, dict(self.filter))

    @classmethod
    def make(
        cls,
        parent: DataflowNode | None,
        model: UnitModel,
        data_sources: DataSourcesForHandlingInvalidValues,
    ) -> FilterInvalidNode | None:
        """
        Build the node for a model, or None when no field needs filtering.

        Args:
            parent: Node to attach under.
            model: Unit model providing encoding, scales, mark def and config.
            data_sources: Whether marks/scale domains read data with invalid values.

        Returns:
            FilterInvalidNode | None: None when every data source includes invalid
            values, or when no scale channel's policy requires filtering.

        Raises:
            InvariantViolation: If a field def bound to a scale has no type.
        """
        if data_sources.includes_all:
            return None

        def collect(acc: dict[str, FieldDef], fd: FieldDef, channel: str) -> dict[str, FieldDef]:
            scale = model.get_scale_component(channel) if is_scale_channel(channel) else None
            if scale is None:
                return acc
            mode = get_scale_invalid_data_mode(
                scale_channel=channel,
                mark_def=model.mark_def,
                config=model.config,
                scale_type=scale.type,
                is_count_aggregate=is_counting_aggregate_op(fd.aggregate),
            )
            if mode not in _PASS_THROUGH_MODES:
                if fd.type is None:
                    msg = messages.field_def_missing_type(channel, fd.field)
                    logger.error(msg)
                    raise InvariantViolation(msg)
                acc[fd.field] = fd
            return acc

        filter_ = model.reduce_field_def(collect, {})
        if not filter_:
            return None
        return cls(parent, filter_)

    def dependent_fields(self) -> set[str]:
        return set(self.filter)

    def produced_fields(self) -> set[str]:
        return set()

    def hash(self) -> str:
        return f"FilterInvalid {hash_spec(self.filter)}"

    def assemble(self) -> JsonDict | None:
        """One filter transform AND-ing a validity test per guarded field, or None."""
        filters: list[str] = []
        for fd in self.filter.values():
            ref = vg_field(fd, expr="datum")
            match fd.type:
                case FieldType.TEMPORAL:
                    filters.append(f"(isDate({ref}) || ({is_valid_finite_number_expr(ref)}))")
                case FieldType.QUANTITATIVE:
                    filters.append(is_valid_finite_number_expr(ref))
                case FieldType.ORDINAL | FieldType.NOMINAL | None:
                    msg = messages.cannot_filter_discrete_field(fd.field, fd.type)
                    logger.error(msg)
                    raise InvariantViolation(msg)
        if not filters:
            return None
        return {"type": "filter", "expr": " && ".join(filters)}
