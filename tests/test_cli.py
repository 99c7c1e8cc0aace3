import json
from types import SimpleNamespace

from typer.testing import CliRunner

from sales_copilot import cli
from sales_copilot.cli import app
from sales_copilot.llm_scorer import LLMClient


runner = CliRunner()

PRAGMATIC_TEXT = "Preciso saber quanto custa e quando posso ver resultado. Qual é o ROI concreto?"


class TestAnalyzeCommand:
    def test_analyze_text(self):
        result = runner.invoke(app, ["analyze", PRAGMATIC_TEXT])

        assert result.exit_code == 0
        assert "PRAGMATIC" in result.output
        assert "70%" in result.output
        assert "Seja direto e apresente resultados concretos" in result.output

    def test_analyze_file(self, tmp_path):
        path = tmp_path / "call.txt"
        path.write_text("Vendedor: Olá!\nCliente: " + PRAGMATIC_TEXT + "\n", encoding="utf-8")

        result = runner.invoke(app, ["analyze", "--file", str(path)])

        assert result.exit_code == 0
        assert "PRAGMATIC" in result.output

    def test_missing_file_exits_with_error(self, tmp_path):
        result = runner.invoke(app, ["analyze", "--file", str(tmp_path / "missing.txt")])
        assert result.exit_code == 1

    def test_no_input_exits_with_error(self):
        result = runner.invoke(app, ["analyze"])
        assert result.exit_code == 1


class TestBatchCommand:
    def test_batch_writes_reports(self, tmp_path):
        input_dir = tmp_path / "transcripts"
        input_dir.mkdir()
        (input_dir / "a.txt").write_text("Cliente: " + PRAGMATIC_TEXT, encoding="utf-8")
        (input_dir / "b.md").write_text("Cliente: Isso é incrível! Adoro a ideia.", encoding="utf-8")
        (input_dir / "empty.txt").write_text("sem falas aqui", encoding="utf-8")
        output_dir = tmp_path / "out"

        result = runner.invoke(app, ["batch", "--in", str(input_dir), "--out", str(output_dir)])

        assert result.exit_code == 0
        assert "Files failed: 1" in result.output
        data = json.loads((output_dir / "profiles.json").read_text(encoding="utf-8"))
        assert {d["conversation_id"] for d in data} == {"a", "b"}
        assert (output_dir / "profiles.csv").exists()
        assert (output_dir / "report.md").exists()

    def test_missing_directory(self, tmp_path):
        result = runner.invoke(app, ["batch", "--in", str(tmp_path / "nope")])
        assert result.exit_code == 1


class TestProfileCommand:
    def test_profile_without_llm(self):
        result = runner.invoke(app, ["profile", "Quero um resultado rápido e direto.", "--no-llm"])

        assert result.exit_code == 0
        assert "Empreendedor" in result.output
        assert "ENFP" in result.output

    def test_profile_with_llm_shows_model_and_falls_back(self, monkeypatch):
        def failing_create(**kwargs):
            raise RuntimeError("offline")

        client = LLMClient(api_key="sk-test", model="gpt-4o")
        client.client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=failing_create)))
        monkeypatch.setattr(cli, "build_llm_client", lambda settings: client)

        result = runner.invoke(app, ["profile", "Quero um resultado rápido e direto.", "--llm"])

        assert result.exit_code == 0
        assert "Model: gpt-4o (Standard GPT-4o model)" in result.output
        assert "Empreendedor" in result.output
        assert "ENFP" in result.output


class TestRecommendCommand:
    def test_portuguese_label(self):
        result = runner.invoke(app, ["recommend", "intuitivo", "--stage", "closing"])

        assert result.exit_code == 0
        assert "Demonstre entusiasmo e visão de futuro" in result.output

    def test_unknown_label_uses_analytical(self):
        result = runner.invoke(app, ["recommend", "dominante"])

        assert result.exit_code == 0
        assert "Forneça dados detalhados e evidências" in result.output
