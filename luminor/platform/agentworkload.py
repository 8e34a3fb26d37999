"""Execution of agent workloads: lookups and drafts."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol, runtime_checkable

_FAKE_LOOKUP_OUTPUT = (
    "Mietvertrag Einheit 12A, Flussufer Apartments. Aktuelle Miete: 1.450 EUR/Monat. "
    "Vertragslaufzeit bis 30.04.2025. Verlängerungsklausel vorhanden. Marktanpassung: +3,2%."
)
_FAKE_DRAFT_OUTPUT = (
    "Sehr geehrte Frau Schmidt,\n\n"
    "vielen Dank für Ihre Anfrage zur Mietvertragsverlängerung für die Einheit 12A "
    "in den Flussufer Apartments.\n\n"
    "Nach Prüfung Ihres Vertrags können wir Ihnen eine Verlängerung zu den aktualisierten "
    "Konditionen anbieten. Die angepasste Miete beträgt 1.496 EUR/Monat (Marktanpassung +3,2%).\n\n"
    "Bitte bestätigen Sie, ob Sie mit den neuen Konditionen einverstanden sind.\n\n"
    "Mit freundlichen Grüßen,\nIhr Verwaltungsteam"
)


class ActionKind(StrEnum):
    """The kind of action an agent performs."""

    LOOKUP = "lookup"
    DRAFT = "draft"


@dataclass(frozen=True)
class WorkloadRequest:
    """An agent workload to execute."""

    action_kind: ActionKind | str
    work_item_id: str = ""
    context: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class WorkloadResult:
    """Output of an agent workload execution."""

    action_kind: ActionKind
    output: str
    metadata: dict[str, str] = field(default_factory=dict)


class UnknownActionKindError(ValueError):
    """Raised when a request names an action kind that is not supported."""


@runtime_checkable
class WorkloadPort(Protocol):
    """Interface for executing agentic workloads."""

    def execute(self, request: WorkloadRequest) -> WorkloadResult: ...


class FakeAdapter:
    """Returns deterministic canned results, for demos and tests."""

    def execute(self, request: WorkloadRequest) -> WorkloadResult:
        """Return the canned result for the request's action kind."""
        try:
            kind = ActionKind(request.action_kind)
        except ValueError:
            raise UnknownActionKindError(
                f"unknown action kind: {request.action_kind}"
            ) from None
        if kind is ActionKind.LOOKUP:
            return WorkloadResult(
                action_kind=ActionKind.LOOKUP,
                output=_FAKE_LOOKUP_OUTPUT,
                metadata={"source": "contract-db"},
            )
        return WorkloadResult(
            action_kind=ActionKind.DRAFT,
            output=_FAKE_DRAFT_OUTPUT,
            metadata={"model": "fake"},
        )


class LiveAdapter:
    """Adapter for a real agent backend; none is configured yet, so every call fails."""

    def execute(self, request: WorkloadRequest) -> WorkloadResult:
        """Always raise: no live backend is available."""
        raise RuntimeError("live agent workload adapter has no backend available")