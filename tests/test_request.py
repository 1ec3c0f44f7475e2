"""Tests for the request model."""

import pytest

from led_migrate.request import (
    FROM_DIR,
    FROM_TAR_GZ,
    FROM_VOLUME,
    TO_TAR_GZ,
    TO_VOLUME,
    OperationKind,
    OperationRequest,
    has_project_prefix,
    managed_volume_name,
    strip_project_prefix,
)


def test_unknown_option_is_rejected():
    with pytest.raises(ValueError, match="from-nowhere"):
        OperationRequest(OperationKind.IMPORT, {"from-nowhere": "x"})


def test_options_are_read_only():
    request = OperationRequest(OperationKind.IMPORT, {FROM_DIR: "a"})
    with pytest.raises(TypeError):
        request.options[FROM_DIR] = "b"


def test_empty_value_counts_as_not_given():
    request = OperationRequest(OperationKind.IMPORT, {FROM_DIR: ""})
    assert not request.is_set(FROM_DIR)
    assert request.get(FROM_DIR) is None
    assert request.source_option is None


def test_first_source_wins():
    request = OperationRequest(OperationKind.IMPORT, {FROM_VOLUME: "v", FROM_TAR_GZ: "a.tar.gz"})
    assert request.given((FROM_DIR, FROM_TAR_GZ, FROM_VOLUME)) == (FROM_TAR_GZ, FROM_VOLUME)
    assert request.source_option == FROM_TAR_GZ


def test_destination_option():
    request = OperationRequest(OperationKind.EXPORT, {TO_VOLUME: "copy"})
    assert request.destination_option == TO_VOLUME
    assert OperationRequest(OperationKind.EXPORT, {TO_TAR_GZ: "x.tar.gz", TO_VOLUME: "v"}).destination_option == TO_TAR_GZ


def test_help_request():
    request = OperationRequest.help()
    assert request.kind is OperationKind.HELP
    assert dict(request.options) == {}


def test_managed_volume_naming():
    assert managed_volume_name("postgres_data") == "lemmy-easy-deploy_postgres_data"
    assert has_project_prefix("lemmy-easy-deploy_foo")
    assert not has_project_prefix("lemmy-easy-deployfoo")
    assert strip_project_prefix("lemmy-easy-deploy_foo") == "foo"
    assert strip_project_prefix("foo") == "foo"
