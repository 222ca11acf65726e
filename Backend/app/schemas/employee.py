from pydantic import BaseModel, Field, EmailStr
from typing import Optional, Literal
from datetime import date
from decimal import Decimal

DUI_PATTERN = r"^[0-9]{8}-[0-9]$"

Sex = Literal["M", "F", "O"]
Money = Decimal


# ---------------------------------------------------------
# CREATE SCHEMA — every required column must be supplied
# ---------------------------------------------------------
class EmployeeCreate(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=100)
    departamento: str = Field(..., min_length=1, max_length=50)
    puesto: str = Field(..., min_length=1, max_length=50, description="Job title")
    dui: Optional[str] = Field(None, max_length=15, pattern=DUI_PATTERN, description="National ID, 00000000-0")
    telefono: Optional[str] = Field(None, max_length=30)
    correo: Optional[EmailStr] = None
    salario_base: Money = Field(..., ge=0, max_digits=10, decimal_places=2)
    bonificacion: Optional[Money] = Field(None, ge=0, max_digits=10, decimal_places=2)
    descuento: Optional[Money] = Field(None, ge=0, max_digits=10, decimal_places=2)
    fecha_contratacion: date
    fecha_nacimiento: date
    sexo: Sex
    evaluacion_desempeno: Optional[Decimal] = Field(None, ge=0, max_digits=5, decimal_places=2)
    estado: Optional[int] = Field(None, ge=0, le=1)

    class Config:
        json_schema_extra = {
            "example": {
                "nombre": "Ana Martinez",
                "departamento": "TI",
                "puesto": "Analista",
                "dui": "01234567-8",
                "telefono": "7777-1234",
                "correo": "ana.martinez@example.com",
                "salario_base": 1200.00,
                "bonificacion": 150.00,
                "descuento": 80.50,
                "fecha_contratacion": "2019-03-01",
                "fecha_nacimiento": "1990-07-15",
                "sexo": "F",
                "evaluacion_desempeno": 88.5,
            }
        }


# ---------------------------------------------------------
# UPDATE SCHEMA — partial; only supplied fields are applied
# ---------------------------------------------------------
class EmployeeUpdate(BaseModel):
    nombre: Optional[str] = Field(None, min_length=1, max_length=100)
    departamento: Optional[str] = Field(None, min_length=1, max_length=50)
    puesto: Optional[str] = Field(None, min_length=1, max_length=50)
    dui: Optional[str] = Field(None, max_length=15, pattern=DUI_PATTERN)
    telefono: Optional[str] = Field(None, max_length=30)
    correo: Optional[EmailStr] = None
    salario_base: Optional[Money] = Field(None, ge=0, max_digits=10, decimal_places=2)
    bonificacion: Optional[Money] = Field(None, ge=0, max_digits=10, decimal_places=2)
    descuento: Optional[Money] = Field(None, ge=0, max_digits=10, decimal_places=2)
    fecha_contratacion: Optional[date] = None
    fecha_nacimiento: Optional[date] = None
    sexo: Optional[Sex] = None
    evaluacion_desempeno: Optional[Decimal] = Field(None, ge=0, max_digits=5, decimal_places=2)
    estado: Optional[int] = Field(None, ge=0, le=1)
