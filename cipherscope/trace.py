"""Trace sinks for step-by-step cipher output.

The engines accept an optional ``trace`` callable and report intermediate
values through it; nothing is recorded when no sink is given. A sink is any
``Callable[[str, int, Sequence[int]], None]`` receiving
``(stage, block_index, values)``.

``TraceCollector`` keeps the steps and renders them the way the UI shows its
process log: one row per stage, each row listing that stage for every block.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Callable, Dict, List, Optional, Sequence

TraceSink = Callable[[str, int, Sequence[int]], None]


@dataclass(frozen=True)
class TraceStep:
    """One intermediate value set of one block."""
    stage: str
    block_index: int
    values: tuple
    width: int = 8              # hex digits per value when rendered

    def render(self) -> str:
        return " ".join(f"0x{v:0{self.width}X}" for v in self.values)


@dataclass
class TraceCollector:
    """Collects trace steps; usable directly as a ``trace`` sink."""
    width: int = 8
    steps: List[TraceStep] = field(default_factory=list)

    def __call__(self, stage: str, block_index: int, values: Sequence[int]) -> None:
        self.steps.append(TraceStep(stage, block_index, tuple(values), self.width))

    def __len__(self) -> int:
        return len(self.steps)

    def stages(self) -> List[str]:
        seen: Dict[str, None] = {}
        for step in self.steps:
            seen.setdefault(step.stage, None)
        return list(seen)

    def rows(self) -> List[str]:
        """Stage-major rows, blocks separated by ``",\\t"``."""
        grouped: Dict[str, List[str]] = {}
        for step in self.steps:
            grouped.setdefault(step.stage, []).append(step.render())
        return [",\t".join(cells) for cells in grouped.values()]

    def process_log(self) -> List[str]:
        return [f"Process {i}: {row}" for i, row in enumerate(self.rows())]

    def to_dict(self) -> List[Dict[str, Any]]:
        return [asdict(step) for step in self.steps]


def emit(trace: Optional[TraceSink], stage: str, block_index: int, *values: int) -> None:
    if trace is not None:
        trace(stage, block_index, values)
