# sgpm/utils/listas.py
import csv
import datetime as dt
import io
import math
from dataclasses import dataclass

# Valores de los selectores que significan "sin filtro"
SIN_FILTRO = (None, "", "todos", "todas")


# -------------------------------------------------------
# Helpers de acceso a campos
# -------------------------------------------------------
def _como_lista(records) -> list:
    if isinstance(records, (list, tuple)):
        return list(records)
    return []


def get_field(record, path: str):
    """
    Lee un campo con ruta punteada: 'usuario.nombre'.
    Devuelve None si algún tramo no existe.
    """
    valor = record
    for parte in path.split("."):
        if not isinstance(valor, dict):
            return None
        valor = valor.get(parte)
    return valor


def _parsear_fecha(valor) -> dt.datetime | None:
    """Acepta datetime, date o texto ISO ('2024-05-01', '2024-05-01T10:00:00Z')."""
    if isinstance(valor, dt.datetime):
        return valor
    if isinstance(valor, dt.date):
        return dt.datetime.combine(valor, dt.time.min)
    if not isinstance(valor, str) or not valor.strip():
        return None

    texto = valor.strip()
    if texto.endswith("Z"):
        texto = texto[:-1] + "+00:00"
    try:
        return dt.datetime.fromisoformat(texto)
    except ValueError:
        return None


def _utc_sin_zona(fecha: dt.datetime) -> dt.datetime:
    if fecha.tzinfo is None:
        return fecha
    return fecha.astimezone(dt.timezone.utc).replace(tzinfo=None)


def _en_rango(valor, desde, hasta) -> bool:
    fecha = _parsear_fecha(valor)
    if fecha is None:
        return False

    for limite, es_inicio in ((desde, True), (hasta, False)):
        if limite in (None, ""):
            continue
        # Un límite sin hora se compara contra el día del registro
        solo_dia = isinstance(limite, dt.date) and not isinstance(limite, dt.datetime)
        if isinstance(limite, str) and "T" not in limite and len(limite.strip()) == 10:
            solo_dia = True

        lim = _parsear_fecha(limite)
        if lim is None:
            continue

        if solo_dia:
            izquierda, derecha = fecha.date(), lim.date()
        else:
            izquierda = _utc_sin_zona(fecha)
            derecha = _utc_sin_zona(lim)

        if es_inicio and izquierda < derecha:
            return False
        if not es_inicio and izquierda > derecha:
            return False

    return True


# -------------------------------------------------------
# Filtrado
# -------------------------------------------------------
def filter_records(
    records,
    *,
    search: str | None = None,
    search_fields=(),
    equals: dict | None = None,
    date_field: str | None = None,
    date_from=None,
    date_to=None,
) -> list:
    """
    Aplica la conjunción de filtros opcionales:
    - search: subcadena sin distinguir mayúsculas en cualquiera de search_fields
    - equals: {campo: valor} coincidencia exacta ('todos'/'todas'/vacío = sin filtro)
    - date_from/date_to: rango inclusivo sobre date_field
    """
    filas = _como_lista(records)

    texto = (search or "").strip().lower()
    exactos = {
        campo: valor
        for campo, valor in (equals or {}).items()
        if valor not in SIN_FILTRO
    }
    con_rango = bool(date_field) and (date_from not in (None, "") or date_to not in (None, ""))

    if not texto and not exactos and not con_rango:
        return filas

    resultado = []
    for fila in filas:
        if texto and search_fields:
            coincide = any(
                isinstance(get_field(fila, campo), str)
                and texto in get_field(fila, campo).lower()
                for campo in search_fields
            )
            if not coincide:
                continue

        if any(get_field(fila, campo) != valor for campo, valor in exactos.items()):
            continue

        if con_rango and not _en_rango(get_field(fila, date_field), date_from, date_to):
            continue

        resultado.append(fila)

    return resultado


# -------------------------------------------------------
# Selectores
# -------------------------------------------------------
def opciones_selector(records, etiqueta) -> dict:
    """
    Mapa texto -> registro para un selectbox.
    El id va en el texto para que dos registros con la misma etiqueta no se fundan.
    """
    return {f"{etiqueta(fila)} · #{fila.get('id')}": fila for fila in _como_lista(records)}


# -------------------------------------------------------
# Paginación
# -------------------------------------------------------
def paginate(records, page_index: int, page_size: int) -> list:
    """Página `page_index` (base 0). Fuera de rango -> lista vacía."""
    filas = _como_lista(records)
    if page_size <= 0 or page_index < 0:
        return []
    inicio = page_index * page_size
    return filas[inicio:inicio + page_size]


def total_pages(total: int, page_size: int) -> int:
    if page_size <= 0 or total <= 0:
        return 0
    return math.ceil(total / page_size)


# -------------------------------------------------------
# Exportación CSV
# -------------------------------------------------------
def _valor_columna(record, accessor):
    valor = accessor(record) if callable(accessor) else get_field(record, accessor)
    return "" if valor is None else str(valor)


def to_csv(records, columns) -> str:
    """
    Serializa a CSV: una fila de encabezados y una fila por registro.
    columns es una secuencia de (encabezado, campo_o_función).
    """
    salida = io.StringIO()
    writer = csv.writer(salida, delimiter=",", quotechar='"', lineterminator="\n")

    writer.writerow([encabezado for encabezado, _ in columns])
    for fila in _como_lista(records):
        writer.writerow([_valor_columna(fila, accessor) for _, accessor in columns])

    return salida.getvalue()


def csv_filename(prefix: str, today: dt.date | None = None) -> str:
    """'auditoria' -> 'auditoria_2024-05-01.csv'."""
    today = today or dt.date.today()
    return f"{prefix}_{today.isoformat()}.csv"


# -------------------------------------------------------
# Estado de filtros de una vista
# -------------------------------------------------------
@dataclass
class FilterState:
    busqueda: str = ""
    entidad: str = "todas"
    accion: str = "todas"
    fecha_inicio: str = ""
    fecha_fin: str = ""
    pagina: int = 0
    por_pagina: int = 20

    def limpiar(self) -> None:
        self.busqueda = ""
        self.entidad = "todas"
        self.accion = "todas"
        self.fecha_inicio = ""
        self.fecha_fin = ""
        self.pagina = 0

    def to_params(self) -> dict:
        """Parámetros de consulta para /auditoria/logs."""
        params = {
            "entidad": self.entidad,
            "accion": self.accion,
            "fechaInicio": self.fecha_inicio,
            "fechaFin": self.fecha_fin,
            "busqueda": self.busqueda.strip(),
            "limit": self.por_pagina,
            "offset": max(self.pagina, 0) * self.por_pagina,
        }
        return {k: v for k, v in params.items() if v not in SIN_FILTRO}
