"""Filing deadlines and quarterly payment dates derived from a tax year."""

from __future__ import annotations

from datetime import date

from pesotax.backend.app.models import (
    DeadlineEntry,
    DeadlineSchedule,
    TaxDeadlineSet,
    TaxpayerCategory,
    ValidationError,
)

# (month, day, offset from the tax year)
ANNUAL_FILING_DATE = (4, 15, 1)
QUARTERLY_PAYMENT_DATES = ((5, 15, 0), (8, 15, 0), (11, 15, 0), (1, 15, 1))

_TITLES = {
    TaxpayerCategory.INDIVIDUAL: ("Individual Income Tax Return (ITR)", "Individual"),
    TaxpayerCategory.BUSINESS: ("Business Income Tax Return", "Business"),
    TaxpayerCategory.CORPORATE: ("Corporate Income Tax Return", "Corporate"),
}

_FORMS = {
    TaxpayerCategory.INDIVIDUAL: ("ITR 1700/1701", "BIR Form 1701Q"),
    TaxpayerCategory.BUSINESS: ("ITR 1701", "BIR Form 1701Q"),
    TaxpayerCategory.CORPORATE: ("ITR 1702", "BIR Form 1702Q"),
}


def _resolve(tax_year: int, rule: tuple[int, int, int]) -> date:
    month, day, year_offset = rule
    return date(tax_year + year_offset, month, day)


def _schedule(tax_year: int) -> DeadlineSchedule:
    return DeadlineSchedule(
        annual=_resolve(tax_year, ANNUAL_FILING_DATE),
        quarterly=[_resolve(tax_year, rule) for rule in QUARTERLY_PAYMENT_DATES],
    )


def get_deadlines(tax_year: int) -> TaxDeadlineSet:
    """Return annual and quarterly deadlines for every taxpayer category."""

    if not date.min.year <= tax_year < date.max.year:
        raise ValidationError(f"Tax year {tax_year} is outside the supported calendar")

    return TaxDeadlineSet(
        tax_year=tax_year,
        individual=_schedule(tax_year),
        business=_schedule(tax_year),
        corporate=_schedule(tax_year),
    )


def list_deadlines(tax_year: int, today: date | None = None) -> list[DeadlineEntry]:
    """Flatten the deadlines for ``tax_year`` into date-ordered calendar entries."""

    reference = today or date.today()
    deadlines = get_deadlines(tax_year)
    entries: list[DeadlineEntry] = []

    for taxpayer in TaxpayerCategory:
        schedule = deadlines.for_category(taxpayer)
        annual_title, prefix = _TITLES[taxpayer]
        annual_form, quarterly_form = _FORMS[taxpayer]

        entries.append(
            DeadlineEntry(
                id=f"{taxpayer.value}-annual",
                title=annual_title,
                taxpayer=taxpayer,
                category="annual",
                form_type=annual_form,
                due_date=schedule.annual,
                is_overdue=schedule.annual < reference,
                days_until=(schedule.annual - reference).days,
                priority="high",
            )
        )
        for quarter, due_date in enumerate(schedule.quarterly, start=1):
            entries.append(
                DeadlineEntry(
                    id=f"{taxpayer.value}-q{quarter}",
                    title=f"{prefix} Quarterly Tax Payment - Q{quarter}",
                    taxpayer=taxpayer,
                    category="quarterly",
                    form_type=quarterly_form,
                    due_date=due_date,
                    is_overdue=due_date < reference,
                    days_until=(due_date - reference).days,
                    priority="medium",
                )
            )

    entries.sort(key=lambda entry: entry.due_date)
    return entries


__all__ = [
    "ANNUAL_FILING_DATE",
    "QUARTERLY_PAYMENT_DATES",
    "get_deadlines",
    "list_deadlines",
]
