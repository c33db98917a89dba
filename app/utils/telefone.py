import re
from typing import List, Optional


def normalizar_telefone(telefone: Optional[str]) -> Optional[str]:
    """
    Deixa só os dígitos e garante o prefixo do país (55) para números BR.

    - remove máscara (espaços, parênteses, hífen, '+')
    - remove prefixo internacional "00"
    - DDD + número (10 ou 11 dígitos) recebe "55" na frente
    """
    if telefone is None:
        return None

    digitos = re.sub(r"[^\d]", "", str(telefone))
    if not digitos:
        return digitos

    if digitos.startswith("00"):
        digitos = digitos[2:]

    if digitos.startswith("55") and len(digitos) >= 12:
        return digitos

    if len(digitos) in (10, 11):
        return "55" + digitos

    return digitos


def variantes_celular_para_busca(telefone: Optional[str]) -> List[str]:
    """
    Número normalizado e a variante com/sem o nono dígito, para que a busca
    por telefone encontre pedidos feitos antes e depois da migração do 9.
    """
    base = normalizar_telefone(telefone)
    if not base or len(base) < 10:
        return []

    variantes: List[str] = [base]
    if base.startswith("55"):
        nacional = base[2:]
        if len(nacional) == 10:
            variantes.append("55" + nacional[:2] + "9" + nacional[2:])
        elif len(nacional) == 11 and nacional[2] == "9":
            variantes.append("55" + nacional[:2] + nacional[3:])
    return variantes
