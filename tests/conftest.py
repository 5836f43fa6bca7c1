"""Pytest configuration and shared fixtures for engine tests."""

import pytest
from lxml import etree

from schematron_engine.diagnostics import DiagnosticCollector
from schematron_engine.engine import SchematronEngine
from schematron_engine.models import Assertion, AssertionKind, Pattern, Rule, Schema, Variable
from schematron_engine.query import LxmlQueryEvaluator


@pytest.fixture
def evaluator():
    """Default lxml-backed query evaluator."""
    return LxmlQueryEvaluator()


@pytest.fixture
def engine(evaluator):
    return SchematronEngine(evaluator=evaluator)


@pytest.fixture
def collector():
    """Diagnostic sink that records warnings for assertions."""
    return DiagnosticCollector()


@pytest.fixture
def price_document():
    """Three items with prices 10, -1 and 5."""
    return etree.fromstring(
        "<items>"
        '<item id="a"><price>10</price></item>'
        '<item id="b"><price>-1</price></item>'
        '<item id="c"><price>5</price></item>'
        "</items>"
    )


@pytest.fixture
def price_schema():
    """One pattern, one rule: every item must have a positive price."""
    return Schema(
        title="Prices",
        patterns=[
            Pattern(
                id="prices",
                rules=[
                    Rule(
                        id="item-rule",
                        context="//item",
                        assertions=[
                            Assertion(
                                kind=AssertionKind.ASSERT,
                                test="price > 0",
                                message="Item {id} has price {price}",
                                placeholders=[
                                    Variable(name="id", expression="@id"),
                                    Variable(name="price", expression="price"),
                                ],
                                role="error",
                                id="positive-price",
                            )
                        ],
                    )
                ],
            )
        ],
    )


@pytest.fixture
def mixed_document():
    """Elements of two kinds interleaved in document order."""
    return etree.fromstring("<root><a n='1'/><b n='2'/><a n='3'/><c n='4'/></root>")
