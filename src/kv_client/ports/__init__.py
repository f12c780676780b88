"""Ports - contracts between the codecs and their collaborators."""
