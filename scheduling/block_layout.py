"""Jornada diaria: generación de bloques a partir de un BlockLayoutConfig."""

from typing import TYPE_CHECKING

from config.schema import minutes_to_time, time_to_minutes
from models.block import BlockConfig, BlockKind

if TYPE_CHECKING:
    from config.schema import BlockLayoutConfig


def generate_blocks(layout: "BlockLayoutConfig") -> list[BlockConfig]:
    """Genera la secuencia de bloques (clase / recreo / colación) de un día.

    Los recreos y la colación se insertan después del bloque de clase N
    indicado. Un bloque de clase que no alcanza a terminar antes de la hora
    de término no se genera.
    """
    blocks: list[BlockConfig] = []
    current = time_to_minutes(layout.start_time)
    end = time_to_minutes(layout.end_time)
    block_id = 1
    class_count = 0

    def _add(kind: BlockKind, minutes: int) -> None:
        nonlocal current, block_id
        blocks.append(BlockConfig(
            id=block_id,
            start_time=minutes_to_time(current),
            end_time=minutes_to_time(current + minutes),
            kind=kind,
            duration_minutes=minutes,
        ))
        block_id += 1
        current += minutes

    while current < end:
        if class_count > 0:
            for recess in layout.recesses:
                if recess.after_block == class_count:
                    _add(BlockKind.RECREO, recess.duration_minutes)
            if layout.lunch is not None and layout.lunch.after_block == class_count:
                _add(BlockKind.COLACION, layout.lunch.duration_minutes)

        if current + layout.block_minutes > end:
            break
        _add(BlockKind.CLASE, layout.block_minutes)
        class_count += 1

    return blocks


def class_blocks(blocks: list[BlockConfig]) -> list[BlockConfig]:
    """Solo los bloques de clase, en el orden de la jornada."""
    return [b for b in blocks if b.is_class]
