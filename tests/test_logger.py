"""
Tests del logging JSON estructurado.
"""
import json
import logging

from sentinelle.core.logger import StructuredLogger


def test_linea_json_con_caso_y_accion(capsys):
    structured = StructuredLogger("sentinelle.test.stdout")
    structured.log(
        logging.ERROR, "Échec de composition", case_id="INC-0042", action="pdf_export",
        error=ValueError("boom"), pages=None,
    )

    entry = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert entry["level"] == "ERROR"
    assert entry["message"] == "Échec de composition"
    assert entry["case_id"] == "INC-0042"
    assert entry["action"] == "pdf_export"
    assert entry["error_type"] == "ValueError"
    assert "pages" not in entry


def test_fichero_y_nivel_minimo(tmp_path):
    log_file = tmp_path / "logs" / "sentinelle.log"
    structured = StructuredLogger("sentinelle.test.file", log_file, level="WARNING")

    structured.log(logging.INFO, "ignoré")
    structured.log(logging.WARNING, "retenu", action="legal_resolve")
    for handler in structured.logger.handlers:
        handler.flush()

    lines = log_file.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["action"] == "legal_resolve"
