"""
Unit tests for database functionality.
"""

import pytest
from unittest.mock import patch, MagicMock
from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError

from core.database import get_db, get_db_context


class TestDatabaseFunctions:
    """Test cases for database session helpers."""

    @patch('core.database.SessionLocal')
    def test_get_db_success(self, mock_session_local):
        """Test successful database session creation and cleanup."""
        mock_session = MagicMock()
        mock_session_local.return_value = mock_session

        db_iter = get_db()
        db = next(db_iter)

        assert db == mock_session
        mock_session_local.assert_called_once()

        with pytest.raises(StopIteration):
            next(db_iter)

        mock_session.close.assert_called_once()
        mock_session.rollback.assert_not_called()

    @patch('core.database.SessionLocal')
    def test_get_db_rolls_back_on_database_error(self, mock_session_local):
        mock_session = MagicMock()
        mock_session_local.return_value = mock_session

        db_iter = get_db()
        next(db_iter)

        with pytest.raises(SQLAlchemyError):
            db_iter.throw(SQLAlchemyError("boom"))

        mock_session.rollback.assert_called_once()
        mock_session.close.assert_called_once()

    @patch('core.database.SessionLocal')
    def test_get_db_rolls_back_on_http_exception(self, mock_session_local):
        mock_session = MagicMock()
        mock_session_local.return_value = mock_session

        db_iter = get_db()
        next(db_iter)

        with pytest.raises(HTTPException):
            db_iter.throw(HTTPException(status_code=409, detail="conflict"))

        mock_session.rollback.assert_called_once()
        mock_session.close.assert_called_once()

    @patch('core.database.SessionLocal')
    def test_get_db_context_success(self, mock_session_local):
        """Test successful database context manager."""
        mock_session = MagicMock()
        mock_session_local.return_value = mock_session

        with get_db_context() as db:
            assert db == mock_session

        # Should commit and close on success
        mock_session.commit.assert_called_once()
        mock_session.close.assert_called_once()

    @patch('core.database.SessionLocal')
    def test_get_db_context_with_exception(self, mock_session_local):
        """Test database context manager with exception."""
        mock_session = MagicMock()
        mock_session_local.return_value = mock_session

        with pytest.raises(ValueError):
            with get_db_context():
                raise ValueError("Test exception")

        # Should rollback and close on exception
        mock_session.rollback.assert_called_once()
        mock_session.commit.assert_not_called()
        mock_session.close.assert_called_once()
