"""Question Set - interview prompts read from settings."""

from applicant_review.config import Settings


class SettingsQuestionProvider:
    """QuestionSetProvider over Settings.interview_questions (blank prompts dropped)."""

    def __init__(self, settings: Settings):
        self._settings = settings

    def get_questions(self) -> list[str]:
        return [q.strip() for q in self._settings.interview_questions if q and q.strip()]
