"""Shared pytest fixtures for hcljson tests."""

import json
from collections.abc import Callable
from typing import Any

import pytest

from hcljson.core.convert import hcl_to_json


@pytest.fixture
def convert() -> Callable[[str], Any]:
    """Return a helper that converts HCL text and decodes the JSON result."""

    def _convert(source: str) -> Any:
        return json.loads(hcl_to_json(source.encode("utf-8"), "test.tf"))

    return _convert


@pytest.fixture
def resource_hcl() -> str:
    """Return a small Terraform-style document."""
    return """\
variable "region" {
  default = "us-east-1"
}

resource "aws_instance" "web" {
  ami           = var.ami
  instance_type = "t2.micro"
  count         = 2
  name          = "web-${var.env}"

  tags = {
    Name = "web"
  }
}
"""
