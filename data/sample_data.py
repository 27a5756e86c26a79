"""Generate a demo team and budget for the Presence & Budget Planner."""

import random
from typing import List

import pandas as pd

from models.resource import Resource
from models.scenario import BudgetEnvelope, EnvelopeType


def generate_resources_df(year: int = 2025) -> pd.DataFrame:
    """Demo team: a mix of countries, contracts and RUN/CHANGE splits."""
    random.seed(42)
    profiles = [
        ("Camille", "Martin", "Payments", "INTERNAL", 650, "FR", 30),
        ("Lucas", "Bernard", "Payments", "EXTERNAL", 720, "FR", 60),
        ("Ines", "Costa", "Payments", "EXTERNAL", 480, "PT", 50),
        ("Rui", "Ferreira", "Data", "INTERNAL", 430, "PT", 20),
        ("Ananya", "Iyer", "Data", "EXTERNAL", 310, "IN", 40),
        ("Rohan", "Mehta", "Data", "EXTERNAL", 290, "IN", 70),
        ("Valentina", "Gomez", "Mobile", "EXTERNAL", 350, "CO", 80),
        ("Hugo", "Petit", "Mobile", "APPRENTICE", 120, "FR", 100),
    ]
    rows = []
    for first, last, tribe, contract, tjm, country, ratio in profiles:
        start_month = random.choice([1, 1, 1, 3, 4])
        rows.append({
            "First Name": first,
            "Last Name": last,
            "Tribe": tribe,
            "Contract": contract,
            "TJM": tjm,
            "Country": country,
            "Change %": ratio,
            "Start": f"{year}-{start_month:02d}-01",
            "End": f"{year}-12-31" if contract == "APPRENTICE" else "",
        })
    return pd.DataFrame(rows)


def resources_from_df(df: pd.DataFrame) -> List[Resource]:
    """Convert demo rows into resources (no ids yet; the store assigns them)."""
    resources = []
    for _, row in df.iterrows():
        resources.append(Resource.from_record({
            "first_name": row["First Name"],
            "last_name": row["Last Name"],
            "tribe": row["Tribe"],
            "contract_type": row["Contract"],
            "tjm": row["TJM"],
            "country": row["Country"],
            "ratio_change": row["Change %"],
            "start_date": row["Start"],
            "end_date": row["End"],
        }))
    return resources


def generate_envelopes() -> List[BudgetEnvelope]:
    return [
        BudgetEnvelope(id="run-core", name="Run - Core platform", type=EnvelopeType.RUN, amount=450000),
        BudgetEnvelope(id="change-pay", name="Change - Instant payments", type=EnvelopeType.CHANGE, amount=260000),
        BudgetEnvelope(id="change-app", name="Change - Mobile app", type=EnvelopeType.CHANGE, amount=120000),
    ]


async def seed_demo(manager, scenario_id: str, year: int = 2025) -> int:
    """Load the demo team and envelopes into a draft; returns the number of resources added."""
    for envelope in generate_envelopes():
        await manager.add_envelope(scenario_id, envelope)
    resources = resources_from_df(generate_resources_df(year))
    for resource in resources:
        await manager.add_resource(scenario_id, resource)
    return len(resources)
