"""Tests for the build-script scanner."""

from __future__ import annotations

from envcheck.runtime.dockerfile import parse_build_script


def test_full_script() -> None:
    info = parse_build_script(
        "# syntax=docker/dockerfile:1\n"
        "FROM mcr.microsoft.com/devcontainers/python:3.12\n"
        "WORKDIR /workspace\n"
        "USER vscode\n"
        "EXPOSE 8000 5678/tcp\n"
    )
    assert info.base_image == "mcr.microsoft.com/devcontainers/python:3.12"
    assert info.workdir == "/workspace"
    assert info.user == "vscode"
    assert info.exposed_ports == [8000, 5678]


def test_first_from_wins() -> None:
    info = parse_build_script("FROM node:20 AS build\nRUN npm ci\nFROM nginx:alpine\n")
    assert info.base_image == "node:20 AS build"


def test_keywords_are_case_insensitive() -> None:
    info = parse_build_script("from ubuntu:22.04\nworkdir /app\n")
    assert info.base_image == "ubuntu:22.04"
    assert info.workdir == "/app"


def test_missing_directives() -> None:
    info = parse_build_script("RUN echo hi\n")
    assert info.base_image is None
    assert info.workdir is None
    assert info.exposed_ports == []


def test_comments_and_bare_keywords_ignored() -> None:
    info = parse_build_script("# FROM commented:1\nFROM\nFROM debian:12\nEXPOSE abc\n")
    assert info.base_image == "debian:12"
    assert info.exposed_ports == []
