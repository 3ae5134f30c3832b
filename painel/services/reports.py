from collections import Counter, defaultdict
from datetime import date
from dateutil.relativedelta import relativedelta
from typing import Dict, List, Optional

from painel.services.providers import DataProvider

MONTH_LABELS = ["Jan", "Fev", "Mar", "Abr", "Mai", "Jun", "Jul", "Ago", "Set", "Out", "Nov", "Dez"]
CLIENT_STATUS = [("Ativo", "green"), ("Regular", "blue"), ("Atenção", "red")]


def month_range(day: date):
    start = day.replace(day=1)
    end = start + relativedelta(months=1) - relativedelta(days=1)
    return start, end


def _appointment_day(appointment) -> Optional[date]:
    try:
        return date.fromisoformat(str(appointment.get("data"))[:10])
    except ValueError:
        return None


def _value(appointment) -> float:
    return appointment.get("valor") or 0


async def dashboard_stats(data: DataProvider, today: Optional[date] = None) -> Dict:
    today = today or date.today()
    clients = await data.select("clients", "id, etiqueta")
    appointments = await data.select("appointments", "id, tipo, data, cliente_nome")

    by_type = Counter(a.get("tipo") for a in appointments)
    upcoming_clients = {
        a.get("cliente_nome") for a in appointments
        if _appointment_day(a) is not None and _appointment_day(a) >= today
    }

    return {
        "total_clients": len(clients),
        "active_clients": len(upcoming_clients),
        "total_appointments": len(appointments),
        "appointments_today": sum(1 for a in appointments if _appointment_day(a) == today),
        "appointments_by_type": [{"label": label, "value": value} for label, value in by_type.items()],
    }


async def recent_clients(data: DataProvider, limit: int = 5):
    return await data.select("clients", order="created_at", desc=True, limit=limit)


def _top(groups: Dict[str, Dict], key: str, limit: int = 5) -> List[Dict]:
    return sorted(groups.values(), key=lambda g: g[key], reverse=True)[:limit]


async def build_report(data: DataProvider, today: Optional[date] = None) -> Dict:
    today = today or date.today()
    appointments = await data.select("appointments")
    clients = await data.select("clients")
    employees = await data.select("employees", "id")

    services = defaultdict(lambda: {"quantidade": 0, "valor_total": 0})
    top_clients = {}
    employee_performance = {}
    for apt in appointments:
        service = services[apt.get("tipo") or "Outros"]
        service["quantidade"] += 1
        service["valor_total"] += _value(apt)

        client_name = apt.get("cliente_nome") or "Sem cliente"
        client = top_clients.setdefault(client_name, {"nome": client_name, "chamados": 0, "valor": 0})
        client["chamados"] += 1
        client["valor"] += _value(apt)

        employee_name = apt.get("funcionario_nome") or "Sem funcionário"
        employee = employee_performance.setdefault(employee_name, {"nome": employee_name, "atendimentos": 0, "valor": 0})
        employee["atendimentos"] += 1
        employee["valor"] += _value(apt)

    service_rows = [
        {"tipo": tipo, "quantidade": s["quantidade"], "valor_medio": round(s["valor_total"] / s["quantidade"])}
        for tipo, s in services.items()
    ] or [{"tipo": "Sem dados", "quantidade": 0, "valor_medio": 0}]

    tags = Counter(c.get("etiqueta") for c in clients)
    status_counts = {
        "Ativo": tags["green"],
        "Atenção": tags["red"],
        "Regular": len(clients) - tags["green"] - tags["red"],
    }
    client_status = [
        {"name": name, "value": status_counts[name]}
        for name, _ in CLIENT_STATUS
        if status_counts[name] > 0
    ]

    # Last six months, oldest first
    monthly_revenue = []
    for offset in range(5, -1, -1):
        start, end = month_range(today - relativedelta(months=offset))
        total = sum(_value(a) for a in appointments if _appointment_day(a) and start <= _appointment_day(a) <= end)
        monthly_revenue.append({"mes": MONTH_LABELS[start.month - 1], "valor": total})

    current_start, current_end = month_range(today)
    return {
        "total_revenue": sum(_value(a) for a in appointments),
        "current_month_revenue": sum(
            _value(a) for a in appointments
            if _appointment_day(a) and current_start <= _appointment_day(a) <= current_end
        ),
        "total_appointments": len(appointments),
        "total_clients": len(clients),
        "total_employees": len(employees),
        "services": service_rows,
        "client_status": client_status,
        "top_clients": _top(top_clients, "chamados"),
        "monthly_revenue": monthly_revenue,
        "employee_performance": _top(employee_performance, "atendimentos"),
    }
