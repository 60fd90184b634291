"""Pytest configuration and shared fixtures."""

import io
import sys
from datetime import datetime
from pathlib import Path

import pandas as pd
import pytest

# Flat layout: make the repo root importable without installing
sys.path.insert(0, str(Path(__file__).parent.parent))

from utils.config_parser import load_config


def build_workbook(rows, sheets=None):
    """Write rows to an in-memory .xlsx; extra sheets are written after the first."""
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name="Ark1", header=False, index=False)
        for name, extra in (sheets or {}).items():
            pd.DataFrame(extra).to_excel(writer, sheet_name=name, header=False, index=False)
    return buffer.getvalue()


def people_rows(ages):
    """Header + one row per age, age in column D like the survey export."""
    rows = [["Navn", "Klasse", "Kjønn", "Alder"]]
    for i, age in enumerate(ages):
        rows.append([f"Person {i + 1}", "4B", "J" if i % 2 else "G", age])
    return rows


@pytest.fixture
def make_workbook():
    return build_workbook


@pytest.fixture
def ages_workbook():
    return build_workbook(people_rows([5, "x", 200, 12, None, 8]))


@pytest.fixture
def empty_ages_workbook():
    return build_workbook(people_rows(["ukjent", 0, 151, None]))


@pytest.fixture
def default_config():
    return load_config()


@pytest.fixture
def fixed_clock():
    return lambda: datetime(2024, 3, 5, 14, 30, 0)
