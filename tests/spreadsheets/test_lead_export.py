from datetime import date

import pandas as pd

from sgl_tracker.io import (
    LEAD_EXPORT_COLUMNS,
    LEADER_EXPORT_COLUMNS,
    export_leaders,
    export_leads,
    leaders_to_dataframe,
)
from sgl_tracker.models import Lead, LeadStatus, OnboardedLeader


def _lead() -> Lead:
    return Lead(
        id="1",
        name="Almaz Tadesse",
        phone="+251946123456",
        location="Bole",
        status=LeadStatus.AWAITING_DECISION,
        salesperson="Abebe",
    )


def _leader(ordered: bool) -> OnboardedLeader:
    return OnboardedLeader(
        id="2",
        name="Kebede Alemu",
        phone="+251946123457",
        location="Piassa",
        upgrade_date="2024-05-01",
        ordered=ordered,
        cohort="Q3-2024",
        remark="Ordered oil",
    )


def test_export_leads_uses_fixed_columns_and_dated_filename(tmp_path):
    path = export_leads([_lead()], tmp_path, today=date(2024, 5, 6))

    assert path.name == "leadlist_2024-05-06.csv"
    frame = pd.read_csv(path, dtype=str, keep_default_na=False)
    assert list(frame.columns) == LEAD_EXPORT_COLUMNS
    row = frame.iloc[0]
    assert row["Status"] == "Awaiting decision"
    assert row["Remark"] == ""
    assert row["Cohort"] == ""
    assert row["Source"] == "From List"


def test_leaders_to_dataframe_renders_ordered_as_yes_no():
    frame = leaders_to_dataframe([_leader(True), _leader(False)])

    assert list(frame.columns) == LEADER_EXPORT_COLUMNS
    assert list(frame["Ordered"]) == ["Yes", "No"]
    assert frame.loc[0, "Salesperson"] == ""


def test_export_leaders_to_csv_and_excel(tmp_path):
    csv_path = export_leaders([_leader(True)], tmp_path, today=date(2024, 5, 6))
    excel_path = export_leaders([_leader(False)], tmp_path, today=date(2024, 5, 6), suffix=".xlsx")

    assert csv_path.name == "onboarded_list_2024-05-06.csv"
    assert excel_path.name == "onboarded_list_2024-05-06.xlsx"
    csv_frame = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
    excel_frame = pd.read_excel(excel_path, dtype=str, keep_default_na=False)
    assert csv_frame.loc[0, "Upgrade Date"] == "2024-05-01"
    assert csv_frame.loc[0, "Remark"] == "Ordered oil"
    assert excel_frame.loc[0, "Ordered"] == "No"
