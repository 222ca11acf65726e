"""
SQLAlchemy model for the empleados table.
Derived salary/age figures are not stored; see app.services.calculations.
"""

from sqlalchemy import (
    Column, Integer, String, Numeric, Date, DateTime, CHAR,
    func, Index, UniqueConstraint
)

from app.database import Base


ACTIVE = 1
INACTIVE = 0


class Employee(Base):
    __tablename__ = "empleados"

    id = Column("id_empleado", Integer, primary_key=True, autoincrement=True)
    nombre = Column(String(100), nullable=False)
    departamento = Column(String(50), nullable=False, index=True)
    puesto = Column(String(50), nullable=False)

    # Contact fields (unique when present)
    dui = Column(String(15), nullable=True)
    telefono = Column(String(30), nullable=True)
    correo = Column(String(100), nullable=True)

    salario_base = Column(Numeric(10, 2), nullable=False, default=0)
    bonificacion = Column(Numeric(10, 2), nullable=False, default=0)
    descuento = Column(Numeric(10, 2), nullable=False, default=0)

    fecha_contratacion = Column(Date, nullable=False)
    fecha_nacimiento = Column(Date, nullable=False)
    sexo = Column(CHAR(1), nullable=False)
    evaluacion_desempeno = Column(Numeric(5, 2), nullable=True)
    estado = Column(Integer, nullable=False, default=ACTIVE, index=True)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint('dui', name='empleados_dui_unique'),
        UniqueConstraint('telefono', name='empleados_telefono_unique'),
        UniqueConstraint('correo', name='empleados_correo_unique'),
        Index('idx_empleados_sexo', 'sexo'),
    )

    @property
    def is_active(self) -> bool:
        return self.estado == ACTIVE

    def __repr__(self):
        return (
            f"<Employee(id={self.id}, nombre='{self.nombre}', "
            f"departamento='{self.departamento}', estado={self.estado})>"
        )

    def as_dict(self):
        """Convert to dictionary for JSON serialization"""
        return {
            "id": self.id,
            "nombre": self.nombre,
            "departamento": self.departamento,
            "puesto": self.puesto,
            "dui": self.dui,
            "telefono": self.telefono,
            "correo": self.correo,
            "salario_base": float(self.salario_base) if self.salario_base is not None else None,
            "bonificacion": float(self.bonificacion) if self.bonificacion is not None else 0.0,
            "descuento": float(self.descuento) if self.descuento is not None else 0.0,
            "fecha_contratacion": self.fecha_contratacion.isoformat() if self.fecha_contratacion else None,
            "fecha_nacimiento": self.fecha_nacimiento.isoformat() if self.fecha_nacimiento else None,
            "sexo": self.sexo,
            "evaluacion_desempeno": (
                float(self.evaluacion_desempeno) if self.evaluacion_desempeno is not None else None
            ),
            "estado": self.estado,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
