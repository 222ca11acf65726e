from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from typing import Optional, List, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from datetime import datetime
from decimal import Decimal
import logging

from app.database import get_db
from app.utils import success_resp, error_resp
from app.config import (
    MANAGERIAL_TITLES,
    OPERATIONAL_DEPARTMENTS,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
)
from app.models.employee_model import Employee, ACTIVE, INACTIVE
from app.schemas.employee import EmployeeCreate, EmployeeUpdate
from app.services.calculations import (
    BusinessRuleError,
    DataIntegrityError,
    calculation_view,
    check_business_rules,
    derived_fields,
)
from app.services.statistics import build_report
from app.services.roster_export import build_roster_workbook

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/empleados", tags=["empleados"])

EDITABLE_FIELDS = (
    "nombre", "departamento", "puesto", "dui", "telefono", "correo",
    "salario_base", "bonificacion", "descuento",
    "fecha_contratacion", "fecha_nacimiento", "sexo",
    "evaluacion_desempeno", "estado",
)
# May be omitted on update but never set to null
NON_NULLABLE_FIELDS = (
    "nombre", "departamento", "puesto", "salario_base",
    "fecha_contratacion", "fecha_nacimiento", "sexo",
)
UNIQUE_CONTACT_FIELDS = ("dui", "telefono", "correo")


def get_now() -> datetime:
    """Wall-clock dependency, overridable to pin the reference date."""
    return datetime.now()


# ----------------------------
# HELPERS
# ----------------------------
def employee_payload(emp: Employee, now: datetime) -> Dict[str, Any]:
    data = emp.as_dict()
    data.update(derived_fields(emp, now.date()))
    return data


def find_employee(db: Session, employee_id: int) -> Optional[Employee]:
    return db.query(Employee).filter(Employee.id == employee_id).first()


def contact_conflicts(db: Session, values: Dict[str, Any], exclude_id: Optional[int] = None) -> List[Dict[str, str]]:
    """
    Check dui/telefono/correo against every record (active or not).
    On update ``exclude_id`` keeps the record from clashing with its own values.
    """
    errors = []
    for field in UNIQUE_CONTACT_FIELDS:
        value = values.get(field)
        if value is None:
            continue
        query = db.query(Employee.id).filter(getattr(Employee, field) == value)
        if exclude_id is not None:
            query = query.filter(Employee.id != exclude_id)
        if query.first() is not None:
            errors.append({"field": field, "message": f"The {field} '{value}' is already taken"})
    return errors


def integrity_conflicts(exc: IntegrityError) -> List[Dict[str, str]]:
    """
    Map a unique-constraint failure raised at commit time back to its field.
    Matches both "UNIQUE constraint failed: empleados.dui" (sqlite) and
    "Duplicate entry ... for key 'empleados_dui_unique'" (MySQL).
    """
    detail = str(exc.orig)
    errors = [
        {"field": field, "message": f"The {field} is already taken"}
        for field in UNIQUE_CONTACT_FIELDS
        if f"empleados.{field}" in detail or f"empleados_{field}_unique" in detail
    ]
    return errors or [{"field": "record", "message": "Employee violates a uniqueness constraint"}]


def _validation_failed(errors: List[Dict[str, str]]):
    return error_resp("Validation failed", 422, {"errors": errors})


def _not_found(employee_id: int):
    return error_resp(f"Employee {employee_id} not found", 404)


def _not_active(employee_id: int):
    return error_resp(f"Employee {employee_id} is not active", 404)


# ----------------------------
# LIST
# ----------------------------
@router.get("")
def list_employees(
    page: int = Query(1, ge=1),
    per_page: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    departamento: Optional[str] = None,
    sexo: Optional[str] = None,
    with_inactive: bool = False,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """List employees (active only unless with_inactive=true), optionally filtered."""
    query = db.query(Employee)
    if not with_inactive:
        query = query.filter(Employee.estado == ACTIVE)
    if departamento:
        query = query.filter(Employee.departamento == departamento)
    if sexo:
        query = query.filter(Employee.sexo == sexo)

    total = query.count()
    rows = (
        query.order_by(Employee.id)
        .offset((page - 1) * per_page)
        .limit(per_page)
        .all()
    )
    last_page = max(1, -(-total // per_page))

    return success_resp("Employees fetched successfully", {
        "items": [employee_payload(e, now) for e in rows],
        "page": page,
        "per_page": per_page,
        "total": total,
        "last_page": last_page,
    })


# ----------------------------
# STATISTICS
# ----------------------------
@router.get("/estadisticas")
def get_statistics(db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    """Aggregate statistics over the active employees."""
    employees = (
        db.query(Employee)
        .filter(Employee.estado == ACTIVE)
        .order_by(Employee.id)
        .all()
    )
    report = build_report(
        employees,
        now,
        managerial_titles=MANAGERIAL_TITLES,
        operational_departments=OPERATIONAL_DEPARTMENTS,
    )
    return success_resp("Statistics computed successfully", report)


# ----------------------------
# EXCEL EXPORT
# ----------------------------
@router.get("/export-to-excel")
def export_employees_to_excel(
    with_inactive: bool = False,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Export the employee roster to an Excel file"""
    query = db.query(Employee)
    if not with_inactive:
        query = query.filter(Employee.estado == ACTIVE)
    employees = query.order_by(Employee.id).all()

    output = build_roster_workbook(employees, now.date())
    filename = f"empleados_{now.strftime('%Y%m%d_%H%M%S')}.xlsx"
    logger.info("Exported %d employees to %s", len(employees), filename)
    return StreamingResponse(
        output,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ----------------------------
# SINGLE RECORD
# ----------------------------
@router.get("/{employee_id}")
def get_employee(employee_id: int, db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    emp = find_employee(db, employee_id)
    if emp is None:
        return _not_found(employee_id)
    if not emp.is_active:
        return _not_active(employee_id)
    return success_resp("Employee fetched successfully", employee_payload(emp, now))


@router.get("/{employee_id}/calculos")
def get_employee_calculations(employee_id: int, db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    """Gross/net salary, age, tenure and performance ratio for one active employee."""
    emp = find_employee(db, employee_id)
    if emp is None:
        return _not_found(employee_id)
    if not emp.is_active:
        return _not_active(employee_id)

    try:
        view = calculation_view(emp, now.date())
    except DataIntegrityError as e:
        logger.error("Data integrity problem on employee %s: %s", employee_id, e)
        return error_resp(str(e), 409)
    return success_resp("Calculations fetched successfully", view)


# ----------------------------
# CREATE
# ----------------------------
@router.post("")
def create_employee(
    payload: EmployeeCreate,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    values = payload.model_dump()
    if values["bonificacion"] is None:
        values["bonificacion"] = Decimal("0")
    if values["descuento"] is None:
        values["descuento"] = Decimal("0")
    if values["estado"] is None:
        values["estado"] = ACTIVE

    errors = contact_conflicts(db, values)
    if errors:
        return _validation_failed(errors)

    try:
        check_business_rules(values, now.date())
    except BusinessRuleError as e:
        logger.warning("Rejected new employee %r: %s", values.get("nombre"), e)
        return error_resp(str(e), 422)

    emp = Employee(**values)
    db.add(emp)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Integrity error creating employee: %s", e)
        return _validation_failed(integrity_conflicts(e))
    db.refresh(emp)

    logger.info("Created employee %s (%s)", emp.id, emp.nombre)
    return success_resp("Employee created successfully", employee_payload(emp, now), 201)


# ----------------------------
# UPDATE (partial)
# ----------------------------
@router.api_route("/{employee_id}", methods=["PUT", "PATCH"])
def update_employee(
    employee_id: int,
    payload: EmployeeUpdate,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    emp = find_employee(db, employee_id)
    if emp is None:
        return _not_found(employee_id)

    changes = payload.model_dump(exclude_unset=True)

    errors = [
        {"field": field, "message": "This field cannot be null"}
        for field in NON_NULLABLE_FIELDS
        if field in changes and changes[field] is None
    ]
    if errors:
        return _validation_failed(errors)

    for field in ("bonificacion", "descuento"):
        if field in changes and changes[field] is None:
            changes[field] = Decimal("0")
    if "estado" in changes and changes["estado"] is None:
        changes.pop("estado")

    errors = contact_conflicts(db, changes, exclude_id=emp.id)
    if errors:
        return _validation_failed(errors)

    # invariants are checked against stored values overlaid with the changes
    merged = {field: getattr(emp, field) for field in EDITABLE_FIELDS}
    merged.update(changes)
    try:
        check_business_rules(merged, now.date())
    except BusinessRuleError as e:
        logger.warning("Rejected update of employee %s: %s", employee_id, e)
        return error_resp(str(e), 422)

    for field, value in changes.items():
        setattr(emp, field, value)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Integrity error updating employee %s: %s", employee_id, e)
        return _validation_failed(integrity_conflicts(e))
    db.refresh(emp)

    logger.info("Updated employee %s fields=%s", emp.id, sorted(changes))
    return success_resp("Employee updated successfully", employee_payload(emp, now))


# ----------------------------
# DELETE (soft by default)
# ----------------------------
@router.delete("/{employee_id}")
def delete_employee(employee_id: int, force: bool = False, db: Session = Depends(get_db)):
    """Deactivate the employee (estado = 0); force=true removes the row permanently."""
    emp = find_employee(db, employee_id)
    if emp is None:
        return _not_found(employee_id)

    if force:
        db.delete(emp)
        db.commit()
        logger.info("Deleted employee %s permanently", employee_id)
        return success_resp("Employee deleted", {"deleted": True})

    emp.estado = INACTIVE
    db.commit()
    logger.info("Deactivated employee %s", employee_id)
    return success_resp("Employee deactivated", {"soft_deleted": True})
