"""Checks run before the first relay turn."""

from __future__ import annotations

import shutil
from pathlib import Path

from loguru import logger

from .agents import AgentRecipe
from .errors import BinaryNotFoundError, WorkingDirectoryError


def validate_working_directory(path: Path) -> None:
    if not path.exists():
        raise WorkingDirectoryError(path, "Working directory does not exist")
    if not path.is_dir():
        raise WorkingDirectoryError(path, "Path is not a directory")


def check_binary(recipe: AgentRecipe) -> str:
    resolved = shutil.which(recipe.binary)
    if resolved is None:
        raise BinaryNotFoundError(recipe.role, recipe.binary)
    return resolved


def warn_if_missing_api_key(recipe: AgentRecipe, environ: dict[str, str]) -> bool:
    """Warn (without failing) when the recipe's API key is unset or blank."""
    value = recipe.api_key if recipe.api_key is not None else environ.get(recipe.api_key_env)
    if value is None:
        logger.warning("preflight.api_key.missing key={} role={}", recipe.api_key_env, recipe.role.tag)
        return False
    if not value.strip():
        logger.warning("preflight.api_key.empty key={} role={}", recipe.api_key_env, recipe.role.tag)
        return False
    return True


def run_preflight(cwd: Path, recipes: list[AgentRecipe], environ: dict[str, str]) -> None:
    validate_working_directory(cwd)
    for recipe in recipes:
        check_binary(recipe)
    for recipe in recipes:
        warn_if_missing_api_key(recipe, environ)
    logger.info("preflight.ok cwd={}", cwd)
