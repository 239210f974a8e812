import pytest

from manual_dataset import cli
from manual_dataset.types import ProcessReport


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    # pas de .env du dépôt
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PDF_PATH", "")
    monkeypatch.delenv("PDF_PATH")


def test_config_error_exits_2(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main([])
    assert exc.value.code == 2
    assert "PDF" in capsys.readouterr().err


def test_arguments_reach_pipeline(tmp_path, monkeypatch, capsys):
    seen = {}

    def fake_run(cfg):
        seen["cfg"] = cfg
        return ProcessReport(pdf=str(cfg.pdf_path), output_csv=str(cfg.output_csv), output_image_dir="", pages_written=3)

    monkeypatch.setattr(cli, "run_pdf_pipeline", fake_run)
    cli.main([
        "--pdf", "manual.pdf",
        "--output-csv", "dados/saida.csv",
        "--correction-endpoint", "http://svc:3000/ia",
        "--correction-timeout", "30",
        "--renderer", "ghostscript",
        "--skip-last-page",
    ])

    cfg = seen["cfg"]
    assert cfg.pdf_path == tmp_path / "manual.pdf"
    assert cfg.output_csv == tmp_path / "dados" / "saida.csv"
    assert cfg.correction_endpoint == "http://svc:3000/ia"
    assert cfg.correction_timeout == 30.0
    assert cfg.render_backend == "ghostscript"
    assert cfg.skip_last_page is True
    assert "3 page(s)" in capsys.readouterr().out


def test_env_file_is_loaded(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("PDF_PATH=do_env.pdf\n", encoding="utf-8")
    seen = {}

    def fake_run(cfg):
        seen["cfg"] = cfg
        return ProcessReport(pdf="", output_csv="", output_image_dir="", aborted=True, error="x")

    monkeypatch.setattr(cli, "run_pdf_pipeline", fake_run)
    cli.main([])

    assert seen["cfg"].pdf_path.name == "do_env.pdf"
