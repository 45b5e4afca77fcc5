from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ScoringRules:
    line_clear_scores: tuple[int, int, int, int] = (100, 300, 500, 800)
    base_interval_ms: int = 600
    interval_step_ms: int = 50
    score_per_step: int = 5000
    min_interval_ms: int = 300

    def score_for_lines(self, lines: int) -> int:
        if lines <= 0:
            return 0
        return self.line_clear_scores[min(lines, len(self.line_clear_scores)) - 1]

    def drop_interval(self, score: int) -> int:
        """Gravity period in milliseconds for a cumulative ``score``.

        600 ms at the start, 50 ms faster every 5000 points, never below 300.
        """
        steps = max(0, score) // self.score_per_step
        return max(self.min_interval_ms, self.base_interval_ms - steps * self.interval_step_ms)
