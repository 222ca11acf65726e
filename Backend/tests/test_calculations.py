from datetime import date
from decimal import Decimal

import pytest

from app.services.calculations import (
    BusinessRuleError,
    DataIntegrityError,
    calculation_view,
    check_business_rules,
    derived_fields,
    gross_salary,
    net_salary,
    performance_ratio,
    round_half_up,
    years_between,
)
from conftest import make_employee

TODAY = date(2025, 6, 15)


def test_gross_and_net_salary_are_exact():
    assert gross_salary(Decimal("1200.10"), Decimal("150.20")) == Decimal("1350.30")
    assert net_salary(Decimal("1200.10"), Decimal("150.20"), Decimal("80.50")) == Decimal("1269.80")
    assert net_salary(1000, None, None) == Decimal("1000")


def test_round_half_up_rounds_away_from_zero_on_ties():
    assert round_half_up(2.675) == 2.68
    assert round_half_up(Decimal("0.125")) == 0.13
    assert round_half_up(None) is None


@pytest.mark.parametrize("start, expected", [
    (date(2000, 6, 15), 25),
    (date(2000, 6, 16), 24),
    (date(2000, 2, 29), 25),
    (date(2025, 1, 1), 0),
])
def test_years_between_counts_full_years(start, expected):
    assert years_between(start, TODAY) == expected


def test_performance_ratio_null_cases():
    assert performance_ratio(None, 1000) is None
    assert performance_ratio(90, 0) is None
    assert performance_ratio(90, 1000) == 0.09
    assert performance_ratio(1, 3) == 0.333333


def test_derived_fields():
    emp = make_employee(
        salario_base=Decimal("1000.00"), bonificacion=Decimal("250.55"), descuento=Decimal("100.10"),
        fecha_nacimiento=date(1985, 12, 1), fecha_contratacion=date(2010, 7, 1),
        evaluacion_desempeno=Decimal("80.00"),
    )
    out = derived_fields(emp, TODAY)
    assert out["salario_bruto"] == 1250.55
    assert out["salario_neto"] == 1150.45
    assert out["edad"] == 39
    assert out["antiguedad"] == 14
    assert out["ratio_desempeno_salario"] == 0.08


def test_calculation_view_flags_deduction_above_gross():
    emp = make_employee(id=7, salario_base=500, bonificacion=0, descuento=600)
    with pytest.raises(DataIntegrityError):
        calculation_view(emp, TODAY)


def test_calculation_view_payload():
    emp = make_employee(id=3, nombre="Luis", salario_base=Decimal("900"), bonificacion=Decimal("100"),
                        descuento=Decimal("50"))
    view = calculation_view(emp, TODAY)
    assert view["id"] == 3
    assert view["nombre"] == "Luis"
    assert view["salario_bruto"] == 1000.0
    assert view["salario_neto"] == 950.0
    assert view["evaluacion_desempeno"] is None
    assert view["ratio_desempeno_salario"] is None


def _valid_values(**overrides):
    values = {
        "salario_base": Decimal("1000"),
        "bonificacion": Decimal("0"),
        "descuento": Decimal("0"),
        "fecha_nacimiento": date(1990, 1, 1),
        "fecha_contratacion": date(2015, 1, 1),
    }
    values.update(overrides)
    return values


def test_business_rules_accept_valid_record():
    check_business_rules(_valid_values(), TODAY)


def test_business_rules_reject_underage():
    with pytest.raises(BusinessRuleError, match="18"):
        check_business_rules(
            _valid_values(fecha_nacimiento=date(2007, 6, 16), fecha_contratacion=date(2025, 6, 1)),
            TODAY,
        )


def test_business_rules_accept_eighteenth_birthday():
    check_business_rules(
        _valid_values(fecha_nacimiento=date(2007, 6, 15), fecha_contratacion=date(2025, 6, 15)),
        TODAY,
    )


def test_business_rules_reject_birth_after_hire():
    with pytest.raises(BusinessRuleError, match="fecha_nacimiento"):
        check_business_rules(
            _valid_values(fecha_nacimiento=date(1990, 1, 1), fecha_contratacion=date(1989, 12, 31)),
            TODAY,
        )


def test_business_rules_reject_deduction_above_gross():
    with pytest.raises(BusinessRuleError, match="descuento"):
        check_business_rules(
            _valid_values(salario_base=Decimal("1000"), bonificacion=Decimal("100"), descuento=Decimal("1100.01")),
            TODAY,
        )
    # equal to gross is allowed
    check_business_rules(
        _valid_values(salario_base=Decimal("1000"), bonificacion=Decimal("100"), descuento=Decimal("1100")),
        TODAY,
    )
