"""Tests for the skirmish engine."""
