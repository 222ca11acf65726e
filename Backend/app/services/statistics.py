"""
Aggregate report over the active employee set.

``build_report`` is a pure function of an already fetched snapshot of
employees and the current datetime; it performs no queries itself.
"""

import math
from collections import OrderedDict
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence

from app.config import MANAGERIAL_TITLES, OPERATIONAL_DEPARTMENTS
from app.services.calculations import (
    employee_age,
    employee_net_salary,
    employee_tenure,
    round_half_up,
    to_decimal,
)

HIGH_PERFORMER_SCORE = 95
GOOD_PERFORMER_SCORE = 70
LONG_TENURE_YEARS = 10


def pearson_correlation(x: Sequence[float], y: Sequence[float]) -> Optional[float]:
    """
    Pearson correlation coefficient of two numeric series, rounded to 2 decimals.
    Series of different length are truncated to the shorter one. Returns None
    with fewer than 2 pairs or when either series has no variance.
    """
    n = min(len(x), len(y))
    if n < 2:
        return None

    x = [float(v) for v in x[:n]]
    y = [float(v) for v in y[:n]]
    mean_x = sum(x) / n
    mean_y = sum(y) / n

    num = 0.0
    den_x = 0.0
    den_y = 0.0
    for xi, yi in zip(x, y):
        dx = xi - mean_x
        dy = yi - mean_y
        num += dx * dy
        den_x += dx * dx
        den_y += dy * dy

    den = math.sqrt(den_x * den_y)
    if den == 0.0:
        return None
    # not clamped to [-1, 1]
    return round_half_up(num / den, 2)


def _mean(values: Iterable[Any]) -> Optional[Decimal]:
    values = [to_decimal(v) for v in values if v is not None]
    if not values:
        return None
    return sum(values, Decimal("0")) / Decimal(len(values))


def _mean_or_zero(values: Iterable[Any]) -> float:
    avg = _mean(values)
    return round_half_up(avg) if avg is not None else 0.0


def _group_by(employees: Iterable[Any], key) -> "OrderedDict[Any, List[Any]]":
    groups = OrderedDict()
    for emp in employees:
        groups.setdefault(key(emp), []).append(emp)
    return OrderedDict(sorted(groups.items(), key=lambda item: item[0]))


def salary_by_department(employees: Sequence[Any]) -> List[Dict[str, Any]]:
    return [
        {"departamento": dept, "promedio": round_half_up(_mean(e.salario_base for e in group))}
        for dept, group in _group_by(employees, lambda e: e.departamento).items()
    ]


def net_salary_trend_by_hire_year(employees: Sequence[Any]) -> List[Dict[str, Any]]:
    return [
        {
            "anio": year,
            "promedio_salario_neto": round_half_up(_mean(employee_net_salary(e) for e in group)),
            "total": len(group),
        }
        for year, group in _group_by(employees, lambda e: e.fecha_contratacion.year).items()
    ]


def net_salary_growth(employees: Sequence[Any], now: datetime) -> Dict[str, Any]:
    """
    Year-over-year growth of the mean net salary, with cohorts keyed by hire year.
    ``disponible`` is False (and the percentage 0) when a cohort is empty or
    last year's average is not positive.
    """
    this_year = now.year
    last_year = this_year - 1

    current = [employee_net_salary(e) for e in employees if e.fecha_contratacion.year == this_year]
    previous = [employee_net_salary(e) for e in employees if e.fecha_contratacion.year == last_year]
    avg_current = _mean(current)
    avg_previous = _mean(previous)

    available = bool(current) and bool(previous) and avg_previous > 0
    pct = 0.0
    if available:
        pct = round_half_up((avg_current - avg_previous) / avg_previous * 100)

    return {
        "porcentaje": pct,
        "disponible": available,
        "anio_actual": {
            "anio": this_year,
            "total": len(current),
            "promedio_salario_neto": round_half_up(avg_current) if avg_current is not None else 0.0,
        },
        "anio_anterior": {
            "anio": last_year,
            "total": len(previous),
            "promedio_salario_neto": round_half_up(avg_previous) if avg_previous is not None else 0.0,
        },
    }


def sex_distribution(employees: Sequence[Any]) -> List[Dict[str, Any]]:
    return [
        {"sexo": sex, "total": len(group)}
        for sex, group in _group_by(employees, lambda e: e.sexo).items()
    ]


def evaluation_by_department(employees: Sequence[Any]) -> List[Dict[str, Any]]:
    out = []
    for dept, group in _group_by(employees, lambda e: e.departamento).items():
        avg = _mean(e.evaluacion_desempeno for e in group)
        out.append({"departamento": dept, "promedio": round_half_up(avg) if avg is not None else None})
    return out


def _performers_above(employees: Sequence[Any], threshold) -> List[Dict[str, Any]]:
    return [
        {
            "id": e.id,
            "nombre": e.nombre,
            "evaluacion_desempeno": round_half_up(e.evaluacion_desempeno),
        }
        for e in employees
        if e.evaluacion_desempeno is not None and to_decimal(e.evaluacion_desempeno) > threshold
    ]


def build_report(
    employees: Sequence[Any],
    now: datetime,
    managerial_titles: Optional[Iterable[str]] = None,
    operational_departments: Optional[Iterable[str]] = None,
) -> Dict[str, Any]:
    """Compute every statistic of the report over ``employees`` (assumed active)."""
    managerial_titles = set(MANAGERIAL_TITLES if managerial_titles is None else managerial_titles)
    operational_departments = set(
        OPERATIONAL_DEPARTMENTS if operational_departments is None else operational_departments
    )
    today = now.date()

    tenures = [employee_tenure(e, today) for e in employees]

    managerial = [e for e in employees if e.puesto in managerial_titles]
    operational = [e for e in employees if e.departamento in operational_departments]

    # pairs stay index-aligned: both series come from the same filtered list
    evaluated = [e for e in employees if e.evaluacion_desempeno is not None]
    salary_performance = pearson_correlation(
        [float(e.salario_base) for e in evaluated],
        [float(e.evaluacion_desempeno) for e in evaluated],
    )
    tenure_salary = pearson_correlation(
        [float(t) for t in tenures],
        [float(e.salario_base) for e in employees],
    )

    growth = net_salary_growth(employees, now)
    avg_tenure = _mean_or_zero(tenures)

    return {
        "total_empleados_activos": len(employees),
        "promedio_salario_por_departamento": salary_by_department(employees),
        "tendencia_salario_neto_por_anio": net_salary_trend_by_hire_year(employees),
        "total_bonificaciones_mensuales": round_half_up(sum((to_decimal(e.bonificacion) for e in employees), Decimal("0"))),
        "total_descuentos_mensuales": round_half_up(sum((to_decimal(e.descuento) for e in employees), Decimal("0"))),
        "promedio_salario_base": _mean_or_zero(e.salario_base for e in employees),
        "crecimiento_salario_neto": growth,
        "crecimiento_salario_neto_pct": growth["porcentaje"],
        "edad_promedio": _mean_or_zero(employee_age(e, today) for e in employees),
        "distribucion_sexo": sex_distribution(employees),
        "edad_promedio_directivo": _mean_or_zero(employee_age(e, today) for e in managerial),
        "edad_promedio_operativo": _mean_or_zero(employee_age(e, today) for e in operational),
        "evaluacion_promedio_por_departamento": evaluation_by_department(employees),
        "correlacion_salario_desempeno": {
            "coeficiente": salary_performance,
            "muestra": len(evaluated),
        },
        "empleados_con_eval_gt_95": _performers_above(employees, HIGH_PERFORMER_SCORE),
        "personal_eval_gt_70": _performers_above(employees, GOOD_PERFORMER_SCORE),
        "antiguedad_promedio": avg_tenure,
        "tiempo_promedio_permanencia": avg_tenure,
        "correlacion_antiguedad_salario": {
            "coeficiente": tenure_salary,
            "muestra": len(employees),
        },
        "personal_mas_10_anos": [
            {"id": e.id, "nombre": e.nombre, "antiguedad": tenure}
            for e, tenure in zip(employees, tenures)
            if tenure is not None and tenure > LONG_TENURE_YEARS
        ],
    }
