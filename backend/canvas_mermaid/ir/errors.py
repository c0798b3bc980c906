from typing import List


class CanvasValidationError(ValueError):
    """Raised when canvas data cannot be turned into a canonical graph."""

    def __init__(self, message: str, issues: List = None):
        super().__init__(message)
        self.issues = list(issues or [])

    @property
    def codes(self) -> List[str]:
        return [issue.code for issue in self.issues]
