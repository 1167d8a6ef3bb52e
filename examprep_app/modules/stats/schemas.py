from dataclasses import dataclass
from typing import Dict


@dataclass
class HistoryStats:
    """Summary of finished exams. All zero for an empty history."""
    total_exams: int = 0
    passed_exams: int = 0
    average_score: int = 0
    best_score: int = 0
    pass_rate: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            'totalExams': self.total_exams,
            'passedExams': self.passed_exams,
            'averageScore': self.average_score,
            'bestScore': self.best_score,
            'passRate': self.pass_rate,
        }
