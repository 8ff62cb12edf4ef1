"""Tests for panel-chat."""
