from models.resource import CalendarTemplate, ContractType, Country, Resource, PRESENCE_VALUES
from models.scenario import (
    BudgetEnvelope, EnvelopeType, Scenario, ScenarioStatus, new_draft_name, order_versions,
)
from models.stats import BudgetSummary, DayStatus, PeriodStats, ResourceStats
