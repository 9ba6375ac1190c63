"""Tests for main entry point."""

from argparse import Namespace
from unittest.mock import MagicMock, patch

from gc_summary.main import main


def cli_returning(mock_cli_manager_class, args):
    mock_cli_manager = MagicMock()
    mock_cli_manager.parse_args.return_value = args
    mock_cli_manager_class.return_value = mock_cli_manager
    return mock_cli_manager


class TestMain:
    """Test the main entry point function."""

    @patch('gc_summary.main.Application')
    @patch('gc_summary.main.CLIConfigManager')
    @patch('gc_summary.main.setup_logging')
    def test_main_successful_execution(self, mock_setup_logging, mock_cli_manager_class, mock_app_class):
        args = Namespace(log_level='DEBUG', log_format='json', command='run')
        cli_returning(mock_cli_manager_class, args)
        mock_app_class.return_value.run.return_value = 0

        result = main()

        assert result == 0
        mock_setup_logging.assert_called_once_with(level='DEBUG', format_type='json')
        mock_app_class.return_value.run.assert_called_once_with(args)

    @patch('gc_summary.main.Application')
    @patch('gc_summary.main.CLIConfigManager')
    @patch('gc_summary.main.setup_logging')
    def test_main_returns_application_exit_code(self, mock_setup_logging, mock_cli_manager_class,
                                                mock_app_class):
        cli_returning(mock_cli_manager_class, Namespace(log_level='INFO', log_format='standard', command='run'))
        mock_app_class.return_value.run.return_value = 1

        assert main() == 1

    @patch('gc_summary.main.Application')
    @patch('gc_summary.main.CLIConfigManager')
    @patch('gc_summary.main.setup_logging')
    def test_main_keyboard_interrupt(self, mock_setup_logging, mock_cli_manager_class, mock_app_class):
        cli_returning(mock_cli_manager_class, Namespace(log_level='INFO', log_format='standard', command='serve'))
        mock_app_class.return_value.run.side_effect = KeyboardInterrupt()

        assert main() == 130

    @patch('gc_summary.main.get_logger')
    @patch('gc_summary.main.Application')
    @patch('gc_summary.main.CLIConfigManager')
    @patch('gc_summary.main.setup_logging')
    def test_main_unexpected_exception(self, mock_setup_logging, mock_cli_manager_class, mock_app_class,
                                       mock_get_logger):
        cli_returning(mock_cli_manager_class, Namespace(log_level='INFO', log_format='standard', command='run'))
        mock_app_class.return_value.run.side_effect = RuntimeError("boom")

        assert main() == 1
        mock_get_logger.return_value.error.assert_called_once_with("Unexpected error: boom", exc_info=True)

    @patch('gc_summary.main.Application')
    @patch('gc_summary.main.CLIConfigManager')
    @patch('gc_summary.main.setup_logging')
    def test_main_defaults_logging_without_flags(self, mock_setup_logging, mock_cli_manager_class,
                                                 mock_app_class):
        cli_returning(mock_cli_manager_class, Namespace(log_level=None, log_format=None, command='run'))
        mock_app_class.return_value.run.return_value = 0

        main()

        mock_setup_logging.assert_called_once_with(level='INFO', format_type='standard')
