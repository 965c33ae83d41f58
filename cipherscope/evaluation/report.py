"""Structured evaluation report builder.

Aggregates roundtrip and SAC results into a single serializable report for
export and UI display.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List

from .avalanche import SACResult
from .roundtrip import RoundtripResult


@dataclass
class EvaluationReport:
    """Complete evaluation report aggregating all analysis results."""
    timestamp: str = ""
    roundtrip_results: List[RoundtripResult] = field(default_factory=list)
    sac_results: List[SACResult] = field(default_factory=list)

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize full report for JSON export."""
        return {
            "timestamp": self.timestamp,
            "roundtrip": [r.to_dict() for r in self.roundtrip_results],
            "sac": [s.to_dict() for s in self.sac_results],
            "summary": {
                "total_algorithms_tested": len(self.roundtrip_results),
                "roundtrip_all_pass": all(r.is_perfect for r in self.roundtrip_results),
                "sac_all_pass": all(s.passes_sac for s in self.sac_results),
                "failing_algorithms": self.failing_algorithms(),
                "weak_sac_algorithms": self.weak_sac_algorithms(),
            },
        }

    def to_summary(self) -> str:
        """Human-readable summary for the CLI and Streamlit display."""
        lines = [f"Evaluation Report - {self.timestamp}", "=" * 50]

        if self.roundtrip_results:
            rt_pass = sum(1 for r in self.roundtrip_results if r.is_perfect)
            rt_total = len(self.roundtrip_results)
            lines.append(f"\nRoundtrip Tests: {rt_pass}/{rt_total} algorithms pass")
            for r in self.roundtrip_results:
                lines.append(f"  {r.summary()}")

        if self.sac_results:
            sac_pass = sum(1 for s in self.sac_results if s.passes_sac)
            sac_total = len(self.sac_results)
            lines.append(f"\nSAC Analysis: {sac_pass}/{sac_total} pass")
            for s in self.sac_results:
                lines.append(f"  {s.summary()}")

        return "\n".join(lines)

    def failing_algorithms(self) -> List[str]:
        return [r.algorithm_name for r in self.roundtrip_results if not r.is_perfect]

    def weak_sac_algorithms(self) -> List[str]:
        """Names of engines failing the SAC heuristic for any input type."""
        return sorted({s.algorithm_name for s in self.sac_results if not s.passes_sac})
