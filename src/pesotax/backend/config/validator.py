"""Utilities for validating year configuration data and surfacing issues."""

from __future__ import annotations

import argparse
from typing import Sequence

from .year_config import (
    BracketTable,
    ConfigurationError,
    IncomeCategory,
    TaxRules,
    YearConfiguration,
    available_years,
    load_year_configuration,
)


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_brackets(year: int, table: BracketTable) -> list[str]:
    errors: list[str] = []
    scope = "brackets"

    if table.tax_year != year:
        errors.append(
            _format_scope(scope, f"table declares year {table.tax_year}, expected {year}")
        )

    orders = [bracket.order for bracket in table.brackets]
    if orders != list(range(1, len(orders) + 1)):
        errors.append(
            _format_scope(scope, f"bracket order values should be consecutive: {orders}")
        )

    if table.brackets[0].rate != 0:
        errors.append(_format_scope(scope, "the first bracket should be exempt (0% rate)"))

    return errors


def _validate_rules(rules: TaxRules, table: BracketTable) -> list[str]:
    errors: list[str] = []

    if rules.exemption_cap <= 0:
        errors.append(_format_scope("rules.exemption_cap", "must be positive"))
    if rules.standard_deduction <= 0:
        errors.append(_format_scope("rules.standard_deduction", "must be positive"))

    top_rate = table.brackets[-1].rate
    if rules.flat_business_rate >= top_rate:
        errors.append(
            _format_scope(
                "rules.flat_business_rate",
                f"{rules.flat_business_rate:.2%} should be below the top bracket rate "
                f"{top_rate:.2%}",
            )
        )

    if rules.optional_standard_deduction_rate >= 1:
        errors.append(
            _format_scope("rules.optional_standard_deduction_rate", "must be below 100%")
        )

    compensation = rules.withholding_rates[IncomeCategory.COMPENSATION]
    if compensation.resident != 0:
        errors.append(
            _format_scope(
                "rules.withholding_rates.compensation",
                "resident compensation is withheld through payroll and should be 0%",
            )
        )

    non_resident_rates = {
        entry.non_resident for entry in rules.withholding_rates.values()
    }
    if len(non_resident_rates) > 1:
        errors.append(
            _format_scope(
                "rules.withholding_rates",
                f"non-resident rates should be uniform, found {sorted(non_resident_rates)}",
            )
        )

    return errors


def validate_year_configuration(config: YearConfiguration) -> list[str]:
    """Return human-readable validation issues detected for ``config``."""

    errors: list[str] = []
    errors.extend(_validate_brackets(config.year, config.brackets))
    errors.extend(_validate_rules(config.rules, config.brackets))
    return errors


def validate_all_years(years: Sequence[int] | None = None) -> dict[int, list[str]]:
    """Validate all configured years and return issues keyed by year."""

    targets = years or available_years()
    results: dict[int, list[str]] = {}

    for year in targets:
        config = load_year_configuration(year)
        results[int(year)] = validate_year_configuration(config)

    return results


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate configured tax years and their bracket tables."
    )
    parser.add_argument(
        "years",
        nargs="*",
        type=int,
        help="Specific years to validate (defaults to all configured years)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)
    years = args.years or available_years()

    if not years:
        parser.print_help()
        return 1

    exit_code = 0

    for year in years:
        try:
            config = load_year_configuration(year)
        except (FileNotFoundError, ConfigurationError) as error:
            print(f"[{year}] failed to load configuration: {error}")
            exit_code = 1
            continue

        issues = validate_year_configuration(config)
        if issues:
            exit_code = 1
            print(f"[{year}] {len(issues)} issue(s) detected:")
            for issue in issues:
                print(f"  - {issue}")
        else:
            print(f"[{year}] OK")

    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
