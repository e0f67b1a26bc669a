#  ___________________________________________________________________________
#
#  Pyomo: Python Optimization Modeling Objects
#  Copyright (c) 2008-2023
#  National Technology and Engineering Solutions of Sandia, LLC
#  Under the terms of Contract DE-NA0003525 with National Technology and
#  Engineering Solutions of Sandia, LLC, the U.S. Government retains certain
#  rights in this software.
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

import math

import pytest

from gsopt import GPModel
from gsopt.errors import InvalidCoefficient
from gsopt.expressions import MonomialExpression, MonomialTerm, PosynomialExpression
from gsopt.tools.monomialApproximation import (
    evaluate_posynomial,
    monomial_approximation,
)


@pytest.fixture
def xy():
    m = GPModel()
    return m.add_variable('x'), m.add_variable('y')


class TestMonomialApproximation:
    def test_single_term_is_unchanged(self, xy):
        x, y = xy
        approx = monomial_approximation(3 * x * y**2, {x: 5.0, y: 0.1})
        assert approx.coefficient == 3.0
        assert dict(approx.exponents) == {x: 1.0, y: 2.0}

    def test_symmetric_sum(self, xy):
        x, y = xy
        approx = monomial_approximation(x + y, {x: 1.0, y: 1.0})
        assert isinstance(approx, MonomialExpression)
        assert approx.coefficient == pytest.approx(2.0)
        assert approx.exponents[x] == pytest.approx(0.5)
        assert approx.exponents[y] == pytest.approx(0.5)

    def test_value_and_gradient_match(self, xy):
        x, y = xy
        posy = 2 * x**2 + x * y + 3
        point = {x: 1.5, y: 0.5}
        approx = monomial_approximation(posy, point)
        assert approx.evaluate(point) == pytest.approx(posy.evaluate(point))
        # d/dx of (2x^2 + xy + 3) scaled by x/f
        f = posy.evaluate(point)
        ex = (4 * 1.5 * 1.5 + 1.5 * 0.5) / f
        ey = (1.5 * 0.5) / f
        assert approx.exponents[x] == pytest.approx(ex)
        assert approx.exponents[y] == pytest.approx(ey)

    def test_constant_term(self, xy):
        x, _ = xy
        approx = monomial_approximation(x + 1, {x: 1.0})
        assert approx.coefficient == pytest.approx(2.0)
        assert dict(approx.exponents) == pytest.approx({x: 0.5})

    def test_underestimates_elsewhere(self, xy):
        x, y = xy
        posy = x + y
        approx = monomial_approximation(posy, {x: 1.0, y: 1.0})
        for point in ({x: 2.0, y: 0.5}, {x: 0.1, y: 10.0}, {x: 3.0, y: 3.0}):
            assert approx.evaluate(point) <= posy.evaluate(point) + 1e-12

    def test_widely_scaled_terms(self, xy):
        x, y = xy
        posy = PosynomialExpression(
            (MonomialTerm(1e300, {x: 1}), MonomialTerm(1e300, {y: 1}))
        )
        log_value, variables, e = evaluate_posynomial(posy, {x: 1e10, y: 1e10})
        assert log_value == pytest.approx(math.log(2.0) + 310 * math.log(10.0))
        assert variables == [x, y]
        assert list(e) == pytest.approx([0.5, 0.5])

    def test_rejects_non_posynomials(self, xy):
        x, y = xy
        with pytest.raises(InvalidCoefficient):
            monomial_approximation(x - y, {x: 1.0, y: 1.0})
        with pytest.raises(InvalidCoefficient):
            evaluate_posynomial(PosynomialExpression(), {})
