"""Unit tests for CloudWatch logging integration."""

import logging
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from tag_sync.utils.cloudwatch_logger import (
    CloudWatchHandler,
    configure_cloudwatch_logging,
    default_log_stream,
)


def _record(msg="Test message"):
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


class TestCloudWatchHandler:
    """Tests for CloudWatchHandler class."""

    @patch("tag_sync.utils.cloudwatch_logger.boto3.client")
    def test_handler_creates_log_group_and_stream(self, mock_boto_client):
        mock_client = MagicMock()
        mock_boto_client.return_value = mock_client

        handler = CloudWatchHandler(log_group="/tag-sync/runs", log_stream="run-1")

        assert handler.log_group == "/tag-sync/runs"
        mock_boto_client.assert_called_once_with("logs", region_name="us-east-1")
        mock_client.create_log_group.assert_called_once_with(logGroupName="/tag-sync/runs")
        mock_client.create_log_stream.assert_called_once_with(
            logGroupName="/tag-sync/runs",
            logStreamName="run-1",
        )

    @patch("tag_sync.utils.cloudwatch_logger.boto3.client")
    def test_handler_tolerates_existing_group_and_stream(self, mock_boto_client):
        mock_client = MagicMock()
        mock_boto_client.return_value = mock_client
        exists = ClientError({"Error": {"Code": "ResourceAlreadyExistsException"}}, "Create")
        mock_client.create_log_group.side_effect = exists
        mock_client.create_log_stream.side_effect = exists

        handler = CloudWatchHandler(log_group="/tag-sync/runs", log_stream="run-1")

        assert handler is not None

    @patch("tag_sync.utils.cloudwatch_logger.boto3.client")
    def test_handler_raises_other_setup_errors(self, mock_boto_client):
        mock_client = MagicMock()
        mock_boto_client.return_value = mock_client
        mock_client.create_log_group.side_effect = ClientError(
            {"Error": {"Code": "AccessDeniedException"}}, "CreateLogGroup"
        )

        with pytest.raises(ClientError):
            CloudWatchHandler(log_group="/tag-sync/runs", log_stream="run-1")

    @patch("tag_sync.utils.cloudwatch_logger.boto3.client")
    def test_handler_emits_log_record(self, mock_boto_client):
        mock_client = MagicMock()
        mock_boto_client.return_value = mock_client
        handler = CloudWatchHandler(log_group="/tag-sync/runs", log_stream="run-1")

        handler.emit(_record())

        kwargs = mock_client.put_log_events.call_args[1]
        assert kwargs["logGroupName"] == "/tag-sync/runs"
        assert kwargs["logStreamName"] == "run-1"
        assert "Test message" in kwargs["logEvents"][0]["message"]

    @patch("tag_sync.utils.cloudwatch_logger.boto3.client")
    def test_handler_emit_errors_do_not_raise(self, mock_boto_client):
        mock_client = MagicMock()
        mock_boto_client.return_value = mock_client
        mock_client.put_log_events.side_effect = ClientError(
            {"Error": {"Code": "ThrottlingException"}}, "PutLogEvents"
        )
        handler = CloudWatchHandler(log_group="/tag-sync/runs", log_stream="run-1")

        with patch.object(handler, "handleError") as handle_error:
            handler.emit(_record())

        handle_error.assert_called_once()


class TestConfigureCloudWatchLogging:
    """Tests for configure_cloudwatch_logging function."""

    @patch("tag_sync.utils.cloudwatch_logger.CloudWatchHandler")
    def test_configure_adds_handler_to_root_logger(self, mock_handler_class):
        mock_handler = MagicMock()
        mock_handler.level = logging.NOTSET
        mock_handler_class.return_value = mock_handler
        root_logger = logging.getLogger()

        try:
            handler = configure_cloudwatch_logging(
                log_group="/custom/group",
                log_stream="custom-stream",
                region="eu-west-1",
            )
            assert handler is mock_handler
            assert mock_handler in root_logger.handlers
        finally:
            root_logger.removeHandler(mock_handler)

        mock_handler_class.assert_called_once_with(
            log_group="/custom/group",
            log_stream="custom-stream",
            region="eu-west-1",
        )

    @patch("tag_sync.utils.cloudwatch_logger.CloudWatchHandler")
    def test_configure_generates_stream_name(self, mock_handler_class):
        mock_handler = MagicMock()
        mock_handler.level = logging.NOTSET
        mock_handler_class.return_value = mock_handler

        try:
            configure_cloudwatch_logging(log_group="/tag-sync/runs")
        finally:
            logging.getLogger().removeHandler(mock_handler)

        stream = mock_handler_class.call_args[1]["log_stream"]
        assert stream.startswith("tag-sync-")

    @patch("tag_sync.utils.cloudwatch_logger.CloudWatchHandler")
    def test_configure_handles_initialization_errors(self, mock_handler_class, capsys):
        mock_handler_class.side_effect = ClientError(
            {"Error": {"Code": "AccessDeniedException"}}, "CreateLogGroup"
        )

        assert configure_cloudwatch_logging(log_group="/tag-sync/runs") is None
        assert "Failed to configure CloudWatch logging" in capsys.readouterr().err


def test_default_log_stream_format():
    stream = default_log_stream()
    assert stream.startswith("tag-sync-")
    assert stream.endswith("Z")
    assert len(stream) == len("tag-sync-20260101T120000Z")
