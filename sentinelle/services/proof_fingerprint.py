"""
Huella de identificación de las pruebas.

Hash polinómico de 32 bits con signo (h = h*31 + ord(c), desbordamiento en
complemento a dos) sobre "id|type|label". La URL NO participa: una prueba
movida de almacenamiento conserva su huella.

No es una prueba criptográfica: identifica la pieza dentro del dossier.
"""
from typing import Optional

FINGERPRINT_WIDTH = 16

_INT32_MASK = 0xFFFFFFFF


def _to_int32(value: int) -> int:
    value &= _INT32_MASK
    return value - 0x100000000 if value & 0x80000000 else value


def polynomial_hash(text: str) -> int:
    """Hash rodante con signo de 32 bits."""
    h = 0
    for char in text:
        h = _to_int32(h * 31 + ord(char))
    return h


def fingerprint_payload(proof_id: str, proof_type: str, label: Optional[str]) -> str:
    return f"{proof_id}|{proof_type}|{label or ''}"


def fingerprint(proof) -> str:
    """
    Huella de una prueba: 16 caracteres hexadecimales en mayúsculas.

    Determinista entre ejecuciones y procesos.
    """
    payload = fingerprint_payload(proof.id, proof.type, proof.label)
    return format(abs(polynomial_hash(payload)), "016X")
