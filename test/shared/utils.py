from typing import Any, Dict

from pytest_bdd.model import Step


def extract_table_data(step: Step) -> Dict[str, Any]:
    rows = step.data_table.rows
    headers = [cell.value for cell in rows[0].cells]
    values = [cell.value for cell in rows[1].cells]
    return dict(zip(headers, values, strict=True))


def extract_table_rows(step: Step) -> list[Dict[str, Any]]:
    rows = step.data_table.rows
    headers = [cell.value for cell in rows[0].cells]
    return [
        dict(zip(headers, [cell.value for cell in row.cells], strict=True)) for row in rows[1:]
    ]


def assert_response_status(response, expected_status: int, message: str | None = None):
    response_text = getattr(response, 'text', getattr(response, 'content', 'N/A'))
    assert response.status_code == expected_status, (
        message or f'Expected {expected_status}, got {response.status_code}: {response_text}'
    )


def tier_by_name(event: Dict[str, Any], name: str) -> Dict[str, Any]:
    return next(tier for tier in event['tiers'] if tier['name'] == name)
