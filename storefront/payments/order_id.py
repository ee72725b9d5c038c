"""
Identifiants de commande courts et partageables (ex: ORD-LZ3K9QF2M1A7).
Dérivés d'un horodatage en microsecondes encodé en base 36, plus deux caractères aléatoires.
L'unicité réelle est garantie par la garde d'idempotence du réconciliateur et la clé primaire.
"""
import re
import secrets
import time

ORDER_ID_PREFIX = "ORD-"
_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"

# Alphabet accepté par les champs reference / tx_ref des fournisseurs
REFERENCE_PATTERN = re.compile(r"^[A-Za-z0-9.=\-]{1,100}$")


def _base36(n: int) -> str:
    if n == 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(_ALPHABET[r])
    return "".join(reversed(out))


def generate_order_id() -> str:
    micros = time.time_ns() // 1000
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(2))
    return f"{ORDER_ID_PREFIX}{_base36(micros)}{suffix}"


def is_valid_reference(value: str) -> bool:
    return bool(value) and bool(REFERENCE_PATTERN.match(value))
