from pesotax.backend.config.validator import (
    main,
    validate_all_years,
    validate_year_configuration,
)
from pesotax.backend.config.year_config import (
    IncomeCategory,
    WithholdingRate,
    load_year_configuration,
)


def test_current_configurations_are_valid() -> None:
    results = validate_all_years()
    assert all(not issues for issues in results.values()), results


def test_validator_flags_flat_rate_above_top_bracket() -> None:
    config = load_year_configuration(2024)
    broken = config.model_copy(
        update={"rules": config.rules.model_copy(update={"flat_business_rate": 0.40})}
    )

    errors = validate_year_configuration(broken)

    assert any("rules.flat_business_rate" in error for error in errors)


def test_validator_flags_resident_compensation_withholding() -> None:
    config = load_year_configuration(2024)
    rates = dict(config.rules.withholding_rates)
    rates[IncomeCategory.COMPENSATION] = WithholdingRate(resident=0.05, non_resident=0.25)
    broken = config.model_copy(
        update={"rules": config.rules.model_copy(update={"withholding_rates": rates})}
    )

    errors = validate_year_configuration(broken)

    assert any("compensation" in error for error in errors)


def test_validator_flags_mixed_non_resident_rates() -> None:
    config = load_year_configuration(2024)
    rates = dict(config.rules.withholding_rates)
    rates[IncomeCategory.RENTAL_INCOME] = WithholdingRate(resident=0.05, non_resident=0.30)
    broken = config.model_copy(
        update={"rules": config.rules.model_copy(update={"withholding_rates": rates})}
    )

    errors = validate_year_configuration(broken)

    assert any("non-resident rates should be uniform" in error for error in errors)


def test_cli_reports_success(capsys) -> None:
    assert main(["2024"]) == 0
    assert "[2024] OK" in capsys.readouterr().out


def test_cli_reports_unknown_year(capsys) -> None:
    assert main(["1999"]) == 1
    assert "failed to load configuration" in capsys.readouterr().out
