import openpyxl
from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.utils import get_column_letter
from datetime import date
from io import BytesIO

from app.services.calculations import derived_fields

HEADERS = [
    "ID", "Nombre", "Departamento", "Puesto", "DUI", "Telefono", "Correo",
    "Salario Base", "Bonificacion", "Descuento", "Salario Bruto", "Salario Neto",
    "Fecha Contratacion", "Fecha Nacimiento", "Sexo", "Evaluacion", "Estado",
]
COLUMN_WIDTHS = [8, 25, 18, 18, 14, 14, 28, 14, 14, 14, 14, 14, 18, 18, 8, 12, 8]


def build_roster_workbook(employees, today: date) -> BytesIO:
    """Write the employee roster to an .xlsx workbook and return it as a rewound buffer."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Empleados"

    # Header row with styling
    ws.append(HEADERS)
    header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF")
    for cell in ws[1]:
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)

    for emp in employees:
        derived = derived_fields(emp, today)
        ws.append([
            emp.id,
            emp.nombre,
            emp.departamento,
            emp.puesto,
            emp.dui or "",
            emp.telefono or "",
            emp.correo or "",
            float(emp.salario_base),
            float(emp.bonificacion or 0),
            float(emp.descuento or 0),
            derived["salario_bruto"],
            derived["salario_neto"],
            emp.fecha_contratacion,
            emp.fecha_nacimiento,
            emp.sexo,
            float(emp.evaluacion_desempeno) if emp.evaluacion_desempeno is not None else None,
            emp.estado,
        ])

    for i, width in enumerate(COLUMN_WIDTHS, 1):
        ws.column_dimensions[get_column_letter(i)].width = width

    for row in ws.iter_rows(min_row=2, max_row=ws.max_row, min_col=1, max_col=len(HEADERS)):
        for cell in row:
            cell.alignment = Alignment(horizontal="left", vertical="center", wrap_text=True)

    output = BytesIO()
    wb.save(output)
    output.seek(0)
    return output
