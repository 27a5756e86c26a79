from dataclasses import dataclass


@dataclass(frozen=True)
class DayStatus:
    value: float            # presence actually counted (0, 0.5 or 1)
    default_value: int      # value implied by weekday/weekend/holiday alone
    is_holiday: bool
    is_weekend: bool
    override_active: bool
    out_of_bounds: bool


@dataclass(frozen=True)
class PeriodStats:
    start: str              # YYYY-MM-DD
    end: str                # YYYY-MM-DD
    days: float
    cost: float


@dataclass(frozen=True)
class ResourceStats:
    days: float
    cost: float
    year: int


@dataclass(frozen=True)
class BudgetSummary:
    budget_run: float
    budget_change: float
    forecast_run: float
    forecast_change: float

    @property
    def budget_total(self) -> float:
        return self.budget_run + self.budget_change

    @property
    def forecast_total(self) -> float:
        return self.forecast_run + self.forecast_change

    @property
    def delta_run(self) -> float:
        return self.budget_run - self.forecast_run

    @property
    def delta_change(self) -> float:
        return self.budget_change - self.forecast_change

    @property
    def delta_total(self) -> float:
        return self.budget_total - self.forecast_total

    @property
    def pct_run(self) -> float:
        return _consumed_pct(self.forecast_run, self.budget_run)

    @property
    def pct_change(self) -> float:
        return _consumed_pct(self.forecast_change, self.budget_change)

    @property
    def pct_total(self) -> float:
        return _consumed_pct(self.forecast_total, self.budget_total)

    @property
    def is_over_budget(self) -> bool:
        return self.delta_total < 0


def _consumed_pct(forecast: float, budget: float) -> float:
    if budget <= 0:
        return 0.0
    return forecast / budget * 100
