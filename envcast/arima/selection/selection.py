"""AICc-based ARMA model selection with an auditable diagnostics override.

Selection rules:
  1) Rank every candidate with a defined AICc, lowest first.
  2) If the AICc-best candidate passes both residual diagnostics, keep it.
  3) Otherwise look at candidates whose AICc is within the policy margin of
     the best; pick the one with the strictly higher diagnostic score
     (ties broken by AICc).
  4) Always report the full ranking, the diagnostic comparison, and why the
     final choice was made.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Sequence

from envcast.arima.candidates.candidates import CandidateFailure
from envcast.arima.diagnostics.residual_diagnostics import DiagnosticReport
from envcast.arima.models.arma_model import CandidateModel
from envcast.constants import SELECTION_ABSOLUTE_MARGIN, SELECTION_RELATIVE_MARGIN
from envcast.exceptions import ModelSelectionError
from envcast.utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SelectionPolicy:
    """Decision policy for the diagnostics override.

    A candidate is within the margin of the AICc-best one when
    ``aicc - best_aicc <= max(relative_margin * |best_aicc|, absolute_margin)``.
    It is materially better when its diagnostic score (tests passed) is
    strictly higher than the best candidate's.

    With the defaults, -57.95 is inside the margin of -62.38
    (4.43 <= 6.24).
    """

    relative_margin: float = SELECTION_RELATIVE_MARGIN
    absolute_margin: float = SELECTION_ABSOLUTE_MARGIN
    allow_override: bool = True

    def __post_init__(self) -> None:
        if self.relative_margin < 0 or self.absolute_margin < 0:
            raise ValueError("selection margins must be non-negative")

    def margin_for(self, best_aicc: float) -> float:
        return max(self.relative_margin * abs(best_aicc), self.absolute_margin)


@dataclass(frozen=True)
class RankedCandidate:
    """One row of the AICc ranking with its diagnostic verdicts."""

    rank: int
    p: int
    q: int
    aic: float
    aicc: float
    delta_aicc: float
    within_margin: bool
    normality_pass: bool
    autocorrelation_pass: bool
    score: int
    shapiro_pvalue: float
    ljung_box_pvalue: float

    @property
    def label(self) -> str:
        return f"ARMA({self.p},{self.q})"

    @property
    def passed(self) -> bool:
        return self.normality_pass and self.autocorrelation_pass


@dataclass(frozen=True)
class SelectionResult:
    """Chosen model plus everything needed to audit the choice."""

    selected: CandidateModel
    diagnostics: DiagnosticReport
    aicc_best: CandidateModel
    ranking: tuple[RankedCandidate, ...]
    override: bool
    rationale: str
    margin: float
    failures: tuple[CandidateFailure, ...]
    policy: SelectionPolicy

    @property
    def order(self) -> tuple[int, int]:
        return self.selected.order

    def diagnostic_comparison(self) -> list[dict[str, Any]]:
        """Side-by-side diagnostics for every ranked candidate."""
        return [
            {
                "model": row.label,
                "aicc": row.aicc,
                "delta_aicc": row.delta_aicc,
                "shapiro_pvalue": row.shapiro_pvalue,
                "ljung_box_pvalue": row.ljung_box_pvalue,
                "normality_pass": row.normality_pass,
                "autocorrelation_pass": row.autocorrelation_pass,
                "score": row.score,
            }
            for row in self.ranking
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "selected": self.selected.to_dict(),
            "selected_diagnostics": self.diagnostics.to_dict(),
            "aicc_best": self.aicc_best.label,
            "override": self.override,
            "rationale": self.rationale,
            "margin": self.margin,
            "ranking": [
                {**asdict(row), "model": row.label, "passed": row.passed} for row in self.ranking
            ],
            "failures": [f.to_dict() for f in self.failures],
            "policy": asdict(self.policy),
        }


def _describe_failures(report: DiagnosticReport) -> str:
    failed = []
    if not report.normality_pass:
        failed.append(f"Shapiro-Wilk p={report.shapiro_pvalue:.4f}")
    if not report.autocorrelation_pass:
        failed.append(
            f"Ljung-Box(lag={report.ljung_box_lag}) p={report.ljung_box_pvalue:.4f}"
        )
    return ", ".join(failed) if failed else "none"


def _split_defined(
    candidates: Sequence[CandidateModel],
    diagnostics: Sequence[DiagnosticReport],
) -> tuple[list[tuple[CandidateModel, DiagnosticReport]], list[CandidateFailure]]:
    """Separate candidates with a usable AICc from those without one."""
    usable: list[tuple[CandidateModel, DiagnosticReport]] = []
    undefined: list[CandidateFailure] = []
    for candidate, report in zip(candidates, diagnostics):
        if (candidate.p, candidate.q) != (report.p, report.q):
            raise ValueError(
                f"diagnostics for ARMA({report.p},{report.q}) do not match {candidate.label}"
            )
        if candidate.aicc is None:
            undefined.append(
                CandidateFailure(
                    p=candidate.p,
                    q=candidate.q,
                    error_type="UndefinedCriterionError",
                    message=(
                        f"AICc undefined for k={candidate.k} parameters on "
                        f"n={candidate.n_obs} observations"
                    ),
                )
            )
        else:
            usable.append((candidate, report))
    return usable, undefined


def _build_ranking(
    ranked: list[tuple[CandidateModel, DiagnosticReport]], best_aicc: float, margin: float
) -> tuple[RankedCandidate, ...]:
    rows = []
    for rank, (candidate, report) in enumerate(ranked, start=1):
        delta = float(candidate.aicc) - best_aicc
        rows.append(
            RankedCandidate(
                rank=rank,
                p=candidate.p,
                q=candidate.q,
                aic=candidate.aic,
                aicc=float(candidate.aicc),
                delta_aicc=delta,
                within_margin=delta <= margin,
                normality_pass=report.normality_pass,
                autocorrelation_pass=report.autocorrelation_pass,
                score=report.score,
                shapiro_pvalue=report.shapiro_pvalue,
                ljung_box_pvalue=report.ljung_box_pvalue,
            )
        )
    return tuple(rows)


def select_model(
    candidates: Sequence[CandidateModel],
    diagnostics: Sequence[DiagnosticReport],
    *,
    policy: SelectionPolicy | None = None,
    failures: Sequence[CandidateFailure] = (),
) -> SelectionResult:
    """Choose the ARMA candidate to forecast with.

    Args:
        candidates: Fitted candidates.
        diagnostics: Residual diagnostics aligned with ``candidates``.
        policy: Override policy; defaults to ``SelectionPolicy()``.
        failures: Candidates that already failed upstream, carried into the
            result for reporting.

    Returns:
        SelectionResult with the chosen model, ranking and rationale.

    Raises:
        ValueError: If candidates and diagnostics are not aligned.
        ModelSelectionError: If no candidate has a defined AICc.
    """
    policy = policy or SelectionPolicy()
    if len(candidates) != len(diagnostics):
        raise ValueError(
            f"got {len(candidates)} candidates but {len(diagnostics)} diagnostic reports"
        )

    usable, undefined = _split_defined(candidates, diagnostics)
    all_failures = tuple(failures) + tuple(undefined)
    if not usable:
        raise ModelSelectionError(
            f"no candidate has a defined AICc ({len(all_failures)} failure(s))"
        )

    ranked = sorted(usable, key=lambda pair: (pair[0].aicc, pair[0].p + pair[0].q))
    best, best_report = ranked[0]
    best_aicc = float(best.aicc)
    margin = policy.margin_for(best_aicc)
    ranking = _build_ranking(ranked, best_aicc, margin)

    chosen, chosen_report = best, best_report
    override = False
    if best_report.passed:
        rationale = (
            f"{best.label} has the lowest AICc ({best_aicc:.2f}) and passes residual diagnostics."
        )
    elif not policy.allow_override:
        rationale = (
            f"{best.label} has the lowest AICc ({best_aicc:.2f}); it fails residual diagnostics "
            f"({_describe_failures(best_report)}) but the diagnostics override is disabled."
        )
    else:
        alternatives = [
            (candidate, report)
            for (candidate, report), row in zip(ranked[1:], ranking[1:])
            if row.within_margin and report.score > best_report.score
        ]
        if alternatives:
            chosen, chosen_report = max(
                alternatives, key=lambda pair: (pair[1].score, -float(pair[0].aicc))
            )
            override = True
            rationale = (
                f"{best.label} has the lowest AICc ({best_aicc:.2f}) but fails residual "
                f"diagnostics ({_describe_failures(best_report)}). {chosen.label} "
                f"(AICc {chosen.aicc:.2f}, delta {float(chosen.aicc) - best_aicc:.2f} within "
                f"margin {margin:.2f}) passes {chosen_report.score}/2 diagnostics and is selected."
            )
        else:
            rationale = (
                f"{best.label} has the lowest AICc ({best_aicc:.2f}); it fails residual "
                f"diagnostics ({_describe_failures(best_report)}) and no candidate within "
                f"margin {margin:.2f} has better diagnostics."
            )

    if override:
        logger.warning(f"Diagnostics override: {rationale}")
    else:
        logger.info(f"Model selection: {rationale}")

    return SelectionResult(
        selected=chosen,
        diagnostics=chosen_report,
        aicc_best=best,
        ranking=ranking,
        override=override,
        rationale=rationale,
        margin=margin,
        failures=all_failures,
        policy=policy,
    )
