"""Unit tests for CLI interface."""

from pathlib import Path
from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from heic_batch import __version__
from heic_batch.cli import main
from heic_batch.errors import InputNotFoundError
from heic_batch.models import BatchResults, ConversionResult, ConversionStatus


def _results(*statuses: ConversionStatus) -> BatchResults:
    results = [
        ConversionResult(
            input_path=Path(f"img{i}.heic"),
            output_path=Path(f"img{i}_heic.jpg") if status == ConversionStatus.SUCCESS else None,
            status=status,
            error_message=None if status == ConversionStatus.SUCCESS else "Decode error for img",
        )
        for i, status in enumerate(statuses)
    ]
    return BatchResults.from_results(results, total_time=0.5)


class TestCLIVersionAndHelp:
    """Test CLI version and help flags."""

    def test_version_flag(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert f"HEIC Batch Converter v{__version__}" in result.output

    def test_help_flag(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["-h"])

        assert result.exit_code == 0
        assert "Convert HEIC images to JPEG or PNG" in result.output
        for option in ("--input_file", "--input_dir", "--output_path", "--delete", "--format"):
            assert option in result.output

    def test_no_inputs_exits_with_error(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, [])

        assert result.exit_code == 1
        assert "Either --input_file or --input_dir must be specified." in result.output

    def test_empty_inputs_exit_with_error(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["--input_file", "", "--input_dir", ""])

        assert result.exit_code == 1
        assert "must be specified" in result.output

    def test_quality_out_of_range_is_rejected(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["--input_file", "a.heic", "--quality", "101"])

        assert result.exit_code == 2

    def test_workers_must_be_positive(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["--input_file", "a.heic", "--workers", "0"])

        assert result.exit_code == 2


class TestCLIArgumentParsing:
    """Test how options reach the configuration and orchestrator."""

    @patch("heic_batch.cli.ConversionOrchestrator")
    @patch("heic_batch.cli.setup_logging")
    def test_single_file(self, mock_setup_logging: MagicMock, mock_orchestrator: MagicMock) -> None:
        mock_instance = mock_orchestrator.return_value
        mock_instance.worker_count = 4
        mock_instance.convert_file.return_value = _results(ConversionStatus.SUCCESS)

        runner = CliRunner()
        result = runner.invoke(main, ["--input_file", "photo.heic"])

        assert result.exit_code == 0
        mock_instance.convert_file.assert_called_once_with(Path("photo.heic"))
        mock_instance.convert_directory.assert_not_called()
        assert "Number of workers: 4" in result.output
        assert "All conversions completed." in result.output

    @patch("heic_batch.cli.ConversionOrchestrator")
    @patch("heic_batch.cli.setup_logging")
    def test_directory(self, mock_setup_logging: MagicMock, mock_orchestrator: MagicMock) -> None:
        mock_instance = mock_orchestrator.return_value
        mock_instance.worker_count = 2
        mock_instance.convert_directory.return_value = _results(
            ConversionStatus.SUCCESS, ConversionStatus.SUCCESS
        )

        runner = CliRunner()
        result = runner.invoke(main, ["--input-dir", "photos"])

        assert result.exit_code == 0
        mock_instance.convert_directory.assert_called_once_with(Path("photos"))
        assert "Conversion Summary" in result.output
        assert "All conversions completed." in result.output

    @patch("heic_batch.cli.ConversionOrchestrator")
    @patch("heic_batch.cli.setup_logging")
    def test_options_build_config(
        self, mock_setup_logging: MagicMock, mock_orchestrator: MagicMock
    ) -> None:
        mock_orchestrator.return_value.convert_directory.return_value = _results()

        runner = CliRunner()
        result = runner.invoke(
            main,
            [
                "--input_dir",
                "photos",
                "--output_path",
                "out",
                "--format",
                "PNG",
                "-q",
                "55",
                "--delete",
                "--workers",
                "3",
            ],
        )

        assert result.exit_code == 0
        config = mock_orchestrator.call_args.args[0]
        assert config.output_format == "png"
        assert config.quality == 55
        assert config.output_path == Path("out")
        assert config.delete_original is True
        assert config.parallel_workers == 3

    @patch("heic_batch.cli.ConversionOrchestrator")
    @patch("heic_batch.cli.setup_logging")
    def test_defaults(self, mock_setup_logging: MagicMock, mock_orchestrator: MagicMock) -> None:
        mock_orchestrator.return_value.convert_file.return_value = _results(ConversionStatus.SUCCESS)

        runner = CliRunner()
        runner.invoke(main, ["--input_file", "photo.heic"])

        config = mock_orchestrator.call_args.args[0]
        assert config.output_format == "jpeg"
        assert config.quality == 80
        assert config.output_path is None
        assert config.delete_original is False
        assert config.parallel_workers is None

    @patch("heic_batch.cli.ConversionOrchestrator")
    @patch("heic_batch.cli.setup_logging")
    def test_input_file_wins_over_input_dir(
        self, mock_setup_logging: MagicMock, mock_orchestrator: MagicMock
    ) -> None:
        mock_instance = mock_orchestrator.return_value
        mock_instance.convert_file.return_value = _results(ConversionStatus.SUCCESS)

        runner = CliRunner()
        result = runner.invoke(main, ["--input_file", "photo.heic", "--input_dir", "photos"])

        assert result.exit_code == 0
        mock_instance.convert_file.assert_called_once()
        mock_instance.convert_directory.assert_not_called()
        mock_setup_logging.return_value.warning.assert_called_once()

    @patch("heic_batch.cli.ConversionOrchestrator")
    @patch("heic_batch.cli.setup_logging")
    def test_verbose_and_log_file(
        self, mock_setup_logging: MagicMock, mock_orchestrator: MagicMock
    ) -> None:
        mock_orchestrator.return_value.convert_file.return_value = _results(ConversionStatus.SUCCESS)

        runner = CliRunner()
        result = runner.invoke(
            main, ["--input_file", "photo.heic", "-v", "--log-file", "run.log"]
        )

        assert result.exit_code == 0
        mock_setup_logging.assert_called_once_with(verbose=True, log_file=Path("run.log"))
        assert "Same as input" in result.output


class TestCLIExitCodes:
    """Test exit codes for failures."""

    @patch("heic_batch.cli.ConversionOrchestrator")
    @patch("heic_batch.cli.setup_logging")
    def test_failed_job_exits_with_error(
        self, mock_setup_logging: MagicMock, mock_orchestrator: MagicMock
    ) -> None:
        mock_orchestrator.return_value.convert_directory.return_value = _results(
            ConversionStatus.SUCCESS, ConversionStatus.FAILED
        )

        runner = CliRunner()
        result = runner.invoke(main, ["--input_dir", "photos"])

        assert result.exit_code == 1
        assert "Failed Conversions" in result.output
        assert "img1.heic" in result.output
        assert "All conversions completed." in result.output

    @patch("heic_batch.cli.ConversionOrchestrator")
    @patch("heic_batch.cli.setup_logging")
    def test_missing_input_exits_with_error(
        self, mock_setup_logging: MagicMock, mock_orchestrator: MagicMock
    ) -> None:
        mock_orchestrator.return_value.convert_file.side_effect = InputNotFoundError(
            "Input file 'nope.heic' does not exist."
        )

        runner = CliRunner()
        result = runner.invoke(main, ["--input_file", "nope.heic"])

        assert result.exit_code == 1
        assert "does not exist" in result.output
        assert "All conversions completed." not in result.output

    @patch("heic_batch.cli.ConversionOrchestrator")
    @patch("heic_batch.cli.setup_logging")
    def test_delete_failure_is_listed(
        self, mock_setup_logging: MagicMock, mock_orchestrator: MagicMock
    ) -> None:
        result_with_delete_error = ConversionResult(
            input_path=Path("img0.heic"),
            output_path=Path("img0_heic.jpg"),
            status=ConversionStatus.SUCCESS,
            delete_error="Failed to delete original file",
        )
        mock_orchestrator.return_value.convert_file.return_value = BatchResults.from_results(
            [result_with_delete_error], total_time=0.1
        )

        runner = CliRunner()
        result = runner.invoke(main, ["--input_file", "img0.heic", "--delete"])

        assert result.exit_code == 0
        assert "Originals Not Deleted" in result.output


class TestCLIEndToEnd:
    """Run the real pipeline on a directory of real HEIC files."""

    def test_directory_conversion(self, real_heic_file, tmp_path) -> None:
        source = real_heic_file("album/IMG_1.heic", size=(40, 30))

        runner = CliRunner()
        result = runner.invoke(
            main, ["--input_dir", str(source.parent), "--format", "png", "--workers", "2"]
        )

        assert result.exit_code == 0, result.output
        assert (source.parent / "IMG_1_heic.png").is_file()
        assert source.exists()
        assert "All conversions completed." in result.output
