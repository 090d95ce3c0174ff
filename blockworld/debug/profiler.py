from __future__ import annotations

import json
import math
import time
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator


@dataclass
class _FrameState:
    kind: str
    start_time: float
    section_totals_ms: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class DrainRecord:
    processed: int
    remaining: int
    elapsed_ms: float
    budget_ms: float

    @property
    def overrun_ms(self) -> float:
        if self.budget_ms <= 0:
            return 0.0
        return max(0.0, self.elapsed_ms - self.budget_ms)


class RuntimeProfiler:
    """Timing samples for frames, named sections and rebuild-queue drains."""

    def __init__(self, enabled: bool = True, slow_frame_ms: float = 25.0, max_records: int = 400) -> None:
        self.enabled = enabled
        self.slow_frame_ms = slow_frame_ms
        self.max_records = max_records
        self.section_samples_ms: dict[str, list[float]] = defaultdict(list)
        self.frame_samples_ms: dict[str, list[float]] = defaultdict(list)
        self.slow_frames: list[dict[str, Any]] = []
        self.drains: list[DrainRecord] = []
        self._active_frame: _FrameState | None = None

    def begin_frame(self, kind: str) -> None:
        if not self.enabled:
            return
        if self._active_frame is not None:
            self.end_frame()
        self._active_frame = _FrameState(kind=kind, start_time=time.perf_counter())

    def end_frame(self, context: dict[str, Any] | None = None) -> None:
        if not self.enabled:
            return
        frame = self._active_frame
        if frame is None:
            return
        self._active_frame = None

        total_ms = (time.perf_counter() - frame.start_time) * 1000.0
        self.frame_samples_ms[f"frame.{frame.kind}"].append(total_ms)
        if total_ms >= self.slow_frame_ms:
            self.slow_frames.append(
                {
                    "kind": frame.kind,
                    "total_ms": total_ms,
                    "context": dict(context or {}),
                    "sections_ms": dict(sorted(frame.section_totals_ms.items(), key=lambda item: item[1], reverse=True)),
                }
            )
            if len(self.slow_frames) > self.max_records:
                self.slow_frames.pop(0)

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        if not self.enabled:
            yield
            return
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record_section_ms(name, (time.perf_counter() - start) * 1000.0)

    def record_section_ms(self, name: str, duration_ms: float) -> None:
        if not self.enabled:
            return
        self.section_samples_ms[name].append(duration_ms)
        frame = self._active_frame
        if frame is not None:
            frame.section_totals_ms[name] = frame.section_totals_ms.get(name, 0.0) + duration_ms

    def record_drain(self, processed: int, remaining: int, elapsed_ms: float, budget_ms: float) -> None:
        if not self.enabled:
            return
        self.drains.append(DrainRecord(processed, remaining, elapsed_ms, budget_ms))
        if len(self.drains) > self.max_records:
            self.drains.pop(0)

    @staticmethod
    def _percentile(values: list[float], p: float) -> float:
        if not values:
            return 0.0
        sorted_values = sorted(values)
        rank = max(0, min(len(sorted_values) - 1, int(math.ceil(len(sorted_values) * p)) - 1))
        return sorted_values[rank]

    def _stats(self, values: list[float]) -> dict[str, float]:
        if not values:
            return {"count": 0.0, "avg_ms": 0.0, "p95_ms": 0.0, "p99_ms": 0.0, "max_ms": 0.0}
        return {
            "count": float(len(values)),
            "avg_ms": sum(values) / len(values),
            "p95_ms": self._percentile(values, 0.95),
            "p99_ms": self._percentile(values, 0.99),
            "max_ms": max(values),
        }

    def drain_summary(self) -> dict[str, float]:
        busy = [d for d in self.drains if d.processed]
        return {
            "drains": float(len(self.drains)),
            "chunks_rebuilt": float(sum(d.processed for d in self.drains)),
            "max_backlog": float(max((d.remaining for d in self.drains), default=0)),
            "max_overrun_ms": max((d.overrun_ms for d in self.drains), default=0.0),
            "avg_busy_drain_ms": sum(d.elapsed_ms for d in busy) / len(busy) if busy else 0.0,
        }

    def build_report(self) -> dict[str, Any]:
        return {
            "generated_at": time.strftime("%Y-%m-%d %H:%M:%S"),
            "slow_frame_threshold_ms": self.slow_frame_ms,
            "frame_stats_ms": {name: self._stats(samples) for name, samples in self.frame_samples_ms.items()},
            "section_stats_ms": {name: self._stats(samples) for name, samples in self.section_samples_ms.items()},
            "rebuild_drains": self.drain_summary(),
            "slow_frames": self.slow_frames,
        }

    def write_report(self, output_dir: str | Path = "profiling") -> tuple[Path, Path] | None:
        if not self.enabled:
            return None

        out_dir = Path(output_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        stamp = time.strftime("%Y%m%d_%H%M%S")
        txt_path = out_dir / f"rebuild_report_{stamp}.txt"
        json_path = out_dir / f"rebuild_report_{stamp}.json"

        report = self.build_report()
        json_path.write_text(json.dumps(report, indent=2), encoding="utf-8")

        lines = ["Block World Timing Report", f"Generated: {report['generated_at']}", ""]
        lines.append("Rebuild Drains")
        for name, value in report["rebuild_drains"].items():
            lines.append(f"- {name}: {value:.2f}")
        for title, stats_by_name in (("Frame Stats", report["frame_stats_ms"]), ("Section Stats", report["section_stats_ms"])):
            lines.append("")
            lines.append(title)
            for name, stats in sorted(stats_by_name.items(), key=lambda item: item[1]["p99_ms"], reverse=True):
                lines.append(
                    f"- {name}: count={int(stats['count'])} avg={stats['avg_ms']:.3f}ms "
                    f"p95={stats['p95_ms']:.3f}ms p99={stats['p99_ms']:.3f}ms max={stats['max_ms']:.3f}ms"
                )
        lines.append("")
        lines.append(f"Slow Frames ({len(self.slow_frames)})")
        for index, frame in enumerate(sorted(self.slow_frames, key=lambda f: f["total_ms"], reverse=True)[:50], start=1):
            lines.append(f"{index}. {frame['kind']} total={frame['total_ms']:.2f}ms context={frame['context']}")
            for sec_name, sec_ms in list(frame["sections_ms"].items())[:5]:
                lines.append(f"   - {sec_name}: {sec_ms:.2f}ms")

        txt_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return txt_path, json_path
