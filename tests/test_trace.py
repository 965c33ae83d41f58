import sys
from pathlib import Path

# Ensure project root is on path
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from cipherscope.trace import TraceCollector, TraceStep, emit


def test_emit_without_sink_is_noop():
    emit(None, "Round 1", 0, 1, 2)


def test_render_width():
    assert TraceStep("x", 0, (0xAB, 1), width=4).render() == "0x00AB 0x0001"


def test_rows_group_by_stage_across_blocks():
    collector = TraceCollector(width=2)
    emit(collector, "IP", 0, 1)
    emit(collector, "Round 1", 0, 2)
    emit(collector, "IP", 1, 3)
    emit(collector, "Round 1", 1, 4)
    assert collector.stages() == ["IP", "Round 1"]
    assert collector.rows() == ["0x01,\t0x03", "0x02,\t0x04"]
    assert collector.process_log() == ["Process 0: 0x01,\t0x03", "Process 1: 0x02,\t0x04"]


def test_to_dict():
    collector = TraceCollector()
    collector("Output", 2, [7])
    assert collector.to_dict() == [{"stage": "Output", "block_index": 2, "values": (7,), "width": 8}]
    assert len(collector) == 1
