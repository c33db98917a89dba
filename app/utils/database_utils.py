from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from app.config.settings import TIMEZONE, HORA_INICIO_DIA_OPERACIONAL


def now_trimmed():
    """Retorna datetime atual no fuso da loja, sem microsegundos"""
    return datetime.now(ZoneInfo(TIMEZONE)).replace(microsecond=0)


def para_fuso_loja(momento: datetime) -> datetime:
    """Datas ingênuas são tratadas como já estando no fuso da loja."""
    tz = ZoneInfo(TIMEZONE)
    if momento.tzinfo is None:
        return momento.replace(tzinfo=tz)
    return momento.astimezone(tz)


def janela_dia_operacional(agora: datetime | None = None) -> tuple[datetime, datetime]:
    """
    Janela [início, fim) do dia operacional que contém `agora`.

    O dia operacional vai das HORA_INICIO_DIA_OPERACIONAL (04:00) de hoje às
    04:00 de amanhã; entre meia-noite e 04:00 ainda vale o dia anterior.
    """
    agora = para_fuso_loja(agora or now_trimmed())
    inicio = agora.replace(hour=HORA_INICIO_DIA_OPERACIONAL, minute=0, second=0, microsecond=0)
    if agora < inicio:
        inicio -= timedelta(days=1)
    return inicio, inicio + timedelta(days=1)
