# PAWhere survey client: the multi-step form controller and its API client
from pawhere.client.api import IntakeApiClient
from pawhere.client.intake_form import IntakeAnswers, IntakeFormController, Notice, SubmitOutcome

__all__ = ["IntakeApiClient", "IntakeAnswers", "IntakeFormController", "Notice", "SubmitOutcome"]
