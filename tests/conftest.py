# pylint: disable=missing-module-docstring
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import pytest

import keymaterial

TARGET_SIZES = [1024, 2048, pytest.param(4096, marks=pytest.mark.slow)]


@pytest.fixture(scope="session", params=TARGET_SIZES)
def keyset(request):
    return keymaterial.known_key(request.param)


@pytest.fixture(scope="session")
def key2048():
    return keymaterial.known_key(2048)


@pytest.fixture(scope="module", params=list(keymaterial.PRIVATE_FORMATS))
def private_format(request) -> str:
    return request.param


@pytest.fixture(scope="module", params=list(keymaterial.PUBLIC_FORMATS))
def public_format(request) -> str:
    return request.param
