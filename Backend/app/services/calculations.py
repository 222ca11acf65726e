"""
Per-employee derived figures and business-rule checks.

Everything here is a pure function of the stored fields and a reference
date, so the values are recomputed on every read instead of being stored.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional

from app.config import MIN_EMPLOYEE_AGE


class BusinessRuleError(ValueError):
    """Raised when a record violates a business invariant (age, dates, deduction)."""


class DataIntegrityError(ValueError):
    """Raised when an already stored record is inconsistent at read time."""


ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    # via str() so 0.1 becomes Decimal('0.1')
    return Decimal(str(value))


def round_half_up(value: Any, places: int = 2) -> Optional[float]:
    if value is None:
        return None
    quantum = Decimal(1).scaleb(-places)
    return float(to_decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def years_between(start: Optional[date], end: date) -> Optional[int]:
    """Full years elapsed from ``start`` to ``end``."""
    if start is None:
        return None
    years = end.year - start.year
    if (end.month, end.day) < (start.month, start.day):
        years -= 1
    return years


# -------------------------
# Derived salary figures
# -------------------------

def gross_salary(base: Any, bonus: Any) -> Decimal:
    return to_decimal(base) + to_decimal(bonus)


def net_salary(base: Any, bonus: Any, deduction: Any) -> Decimal:
    return gross_salary(base, bonus) - to_decimal(deduction)


def performance_ratio(evaluation: Any, base: Any) -> Optional[float]:
    if evaluation is None:
        return None
    base_dec = to_decimal(base)
    if base_dec == ZERO:
        return None
    return round_half_up(to_decimal(evaluation) / base_dec, 6)


def employee_age(employee, today: date) -> Optional[int]:
    return years_between(employee.fecha_nacimiento, today)


def employee_tenure(employee, today: date) -> Optional[int]:
    return years_between(employee.fecha_contratacion, today)


def employee_net_salary(employee) -> Decimal:
    return net_salary(employee.salario_base, employee.bonificacion, employee.descuento)


def derived_fields(employee, today: date) -> Dict[str, Any]:
    return {
        "salario_bruto": round_half_up(gross_salary(employee.salario_base, employee.bonificacion)),
        "salario_neto": round_half_up(employee_net_salary(employee)),
        "edad": employee_age(employee, today),
        "antiguedad": employee_tenure(employee, today),
        "ratio_desempeno_salario": performance_ratio(employee.evaluacion_desempeno, employee.salario_base),
    }


def calculation_view(employee, today: date) -> Dict[str, Any]:
    """
    Stored salary fields plus the derived figures for one employee.
    Raises DataIntegrityError when the stored deduction exceeds gross salary.
    """
    gross = gross_salary(employee.salario_base, employee.bonificacion)
    if to_decimal(employee.descuento) > gross:
        raise DataIntegrityError(
            f"Employee {employee.id} has a deduction ({employee.descuento}) "
            f"greater than gross salary ({gross})"
        )

    view = {
        "id": employee.id,
        "nombre": employee.nombre,
        "salario_base": round_half_up(employee.salario_base),
        "bonificacion": round_half_up(to_decimal(employee.bonificacion)),
        "descuento": round_half_up(to_decimal(employee.descuento)),
        "evaluacion_desempeno": round_half_up(employee.evaluacion_desempeno),
    }
    view.update(derived_fields(employee, today))
    return view


# -------------------------
# Business rules
# -------------------------

def check_business_rules(values: Dict[str, Any], today: date, min_age: int = MIN_EMPLOYEE_AGE) -> None:
    """
    Validate the merged record state. ``values`` holds the final field values
    (stored values overlaid with the incoming changes).
    """
    birth = values.get("fecha_nacimiento")
    hire = values.get("fecha_contratacion")

    if birth is not None and hire is not None and birth > hire:
        raise BusinessRuleError("fecha_nacimiento must be on or before fecha_contratacion")

    if birth is not None:
        age = years_between(birth, today)
        if age < min_age:
            raise BusinessRuleError(f"Employee must be at least {min_age} years old (got {age})")

    gross = gross_salary(values.get("salario_base"), values.get("bonificacion"))
    deduction = to_decimal(values.get("descuento"))
    if deduction > gross:
        raise BusinessRuleError(
            f"descuento ({deduction}) cannot exceed gross salary ({gross})"
        )
