"""
test_capability.py

Tests for the Capability primitive.

Tests cover:
- Parameter construction and validation
- Capability construction and validation
- Immutability
- Structural satisfaction checks
- @implements declarations and inheritance
- Result verification against return type and postcondition
"""

import pytest

from plugboard import (
    Capability,
    CapabilityImmutabilityError,
    ContractViolationError,
    InvalidCapabilityError,
    Parameter,
    TypeMismatchError,
    UnsupportedOperationError,
    declared_capabilities,
    implements,
)


# =============================================================================
# Test Fixtures
# =============================================================================

Workable = Capability("Workable", operation="work", returns=str)
Feedable = Capability("Feedable", operation="eat", returns=str)


@pytest.fixture
def payment() -> Capability:
    """A capability with one required and one optional parameter."""
    return Capability(
        "Payment",
        operation="make_payment",
        parameters=["amount", Parameter("note", required=False)],
        returns=float,
        failures=[UnsupportedOperationError],
    )


# =============================================================================
# Parameter Tests
# =============================================================================

class TestParameter:
    """Tests for Parameter creation and validation."""

    def test_create_required_parameter(self):
        """Test that parameters are required by default."""
        param = Parameter("amount")
        assert param.name == "amount"
        assert param.required is True
        assert str(param) == "amount"

    def test_create_optional_parameter(self):
        """Test creating an optional parameter."""
        param = Parameter("note", required=False)
        assert param.required is False
        assert str(param) == "note?"

    def test_parameter_immutability(self):
        """Test that parameters are immutable."""
        param = Parameter("amount")

        with pytest.raises(CapabilityImmutabilityError):
            param.name = "other"

        with pytest.raises(CapabilityImmutabilityError):
            del param.name

    def test_parameter_rejects_non_identifier(self):
        """Test that parameter names must be identifiers."""
        with pytest.raises(InvalidCapabilityError) as exc_info:
            Parameter("not an identifier")
        assert "P001" in str(exc_info.value)

    def test_parameter_rejects_non_bool_required(self):
        """Test that required must be a bool."""
        with pytest.raises(InvalidCapabilityError):
            Parameter("amount", required=1)  # type: ignore

    def test_parameter_dict_roundtrip(self):
        """Test to_dict/from_dict."""
        param = Parameter("note", required=False)
        assert Parameter.from_dict(param.to_dict()) == param


# =============================================================================
# Capability Construction Tests
# =============================================================================

class TestCapabilityConstruction:
    """Tests for Capability creation and validation."""

    def test_create_minimal_capability(self):
        """Test creating a capability with only name and operation."""
        cap = Capability("Workable", operation="work")
        assert cap.name == "Workable"
        assert cap.operation == "work"
        assert cap.parameters == ()
        assert cap.returns is None
        assert cap.failures == ()
        assert cap.postcondition is None
        assert cap.description is None

    def test_parameters_accept_str_dict_and_parameter(self):
        """Test that parameters can be given in several forms."""
        cap = Capability(
            "Mixed",
            operation="run",
            parameters=["a", {"name": "b"}, Parameter("c", required=False)],
        )
        assert [p.name for p in cap.parameters] == ["a", "b", "c"]
        assert [p.required for p in cap.parameters] == [True, True, False]

    def test_signature(self, payment):
        """Test the human-readable signature."""
        assert payment.signature == "make_payment(amount, note?) -> float"
        assert Workable.signature == "work() -> str"

    def test_signature_with_tuple_returns(self):
        """Test signature rendering of a tuple of return types."""
        cap = Capability("Number", operation="value", returns=(int, float))
        assert cap.signature == "value() -> int | float"

    def test_empty_name_rejected(self):
        """Test that an empty name is rejected."""
        with pytest.raises(InvalidCapabilityError):
            Capability("  ", operation="work")

    def test_invalid_operation_rejected(self):
        """Test that the operation must be an identifier."""
        with pytest.raises(InvalidCapabilityError):
            Capability("Payment", operation="make payment")

    def test_duplicate_parameter_rejected(self):
        """Test that duplicate parameter names are rejected."""
        with pytest.raises(InvalidCapabilityError) as exc_info:
            Capability("Dup", operation="run", parameters=["a", "a"])
        assert "duplicate parameter 'a'" in str(exc_info.value)

    def test_required_after_optional_rejected(self):
        """Test that a required parameter cannot follow an optional one."""
        with pytest.raises(InvalidCapabilityError):
            Capability(
                "Bad",
                operation="run",
                parameters=[Parameter("a", required=False), "b"],
            )

    def test_invalid_parameter_type_rejected(self):
        """Test that parameters must be Parameter, str or dict."""
        with pytest.raises(InvalidCapabilityError):
            Capability("Bad", operation="run", parameters=[42])  # type: ignore

    def test_non_type_returns_rejected(self):
        """Test that returns must be a type."""
        with pytest.raises(InvalidCapabilityError):
            Capability("Bad", operation="run", returns="str")  # type: ignore

    def test_non_exception_failures_rejected(self):
        """Test that failures must be Exception subclasses."""
        with pytest.raises(InvalidCapabilityError):
            Capability("Bad", operation="run", failures=[int])

    def test_non_callable_postcondition_rejected(self):
        """Test that a postcondition must be callable."""
        with pytest.raises(InvalidCapabilityError):
            Capability("Bad", operation="run", postcondition=True)  # type: ignore

    def test_capability_immutability(self, payment):
        """Test that capabilities are immutable."""
        with pytest.raises(CapabilityImmutabilityError):
            payment.name = "Other"

        with pytest.raises(CapabilityImmutabilityError):
            del payment.operation

    def test_equality_and_hash(self):
        """Test content-based equality."""
        a = Capability("Workable", operation="work", returns=str)
        b = Capability("Workable", operation="work", returns=str)
        c = Capability("Workable", operation="labor", returns=str)

        assert a == b
        assert hash(a) == hash(b)
        assert a != c
        assert len({a, b, c}) == 2

    def test_equality_ignores_contract_detail(self):
        """Test that failures and postcondition do not change identity."""
        plain = Capability("Payment", operation="pay", parameters=["amount"], returns=dict)
        strict = Capability(
            "Payment",
            operation="pay",
            parameters=["amount"],
            returns=dict,
            failures=[UnsupportedOperationError],
            postcondition=lambda receipt: receipt["ok"],
        )

        assert plain == strict
        assert hash(plain) == hash(strict)
        assert len({plain, strict}) == 1
        assert plain != Capability("Payment", operation="pay", parameters=["amount"], returns=list)

    def test_to_dict(self, payment):
        """Test the dictionary description."""
        data = payment.to_dict()
        assert data["name"] == "Payment"
        assert data["operation"] == "make_payment"
        assert data["returns"] == "float"
        assert data["failures"] == ["UnsupportedOperationError"]
        assert data["parameters"][1] == {"name": "note", "required": False}

    def test_str_and_repr(self, payment):
        """Test string representations."""
        assert str(payment) == "Payment"
        assert "make_payment(amount, note?)" in repr(payment)


# =============================================================================
# Structural Check Tests
# =============================================================================

class TestStructuralCheck:
    """Tests for Capability.check and related helpers."""

    def test_matching_implementation_accepted(self, payment):
        """Test that an implementation with the right signature passes."""
        class Cash:
            def make_payment(self, amount, note=None):
                return float(amount)

        payment.check(Cash())
        assert payment.is_satisfied_by(Cash())

    def test_var_args_implementation_accepted(self, payment):
        """Test that *args/**kwargs signatures accept any declaration."""
        class Flexible:
            def make_payment(self, *args, **kwargs):
                return 0.0

        assert payment.is_satisfied_by(Flexible())

    def test_missing_operation_rejected(self, payment):
        """Test that a missing operation is a type mismatch."""
        class Nothing:
            pass

        with pytest.raises(TypeMismatchError) as exc_info:
            payment.check(Nothing())
        assert "P002" in str(exc_info.value)
        assert "missing operation 'make_payment'" in str(exc_info.value)

    def test_non_callable_operation_rejected(self):
        """Test that a non-callable attribute is a type mismatch."""
        class Fake:
            work = "not a method"

        with pytest.raises(TypeMismatchError) as exc_info:
            Workable.check(Fake())
        assert "not callable" in str(exc_info.value)

    def test_too_few_parameters_rejected(self, payment):
        """Test that an implementation unable to accept the parameters fails."""
        class NoArgs:
            def make_payment(self):
                return 0.0

        assert not payment.is_satisfied_by(NoArgs())

    def test_missing_optional_parameter_rejected(self, payment):
        """Test that optional parameters must be accepted too."""
        class OnlyAmount:
            def make_payment(self, amount):
                return 0.0

        with pytest.raises(TypeMismatchError):
            payment.check(OnlyAmount())

    def test_extra_required_parameters_rejected(self):
        """Test that extra required parameters cannot be bound."""
        class Needy:
            def work(self, tool):
                return "working"

        assert not Workable.is_satisfied_by(Needy())

    def test_declared_set_excludes_capability(self):
        """Test that a declaration excluding a capability wins over structure."""
        @implements(Workable)
        class Robot:
            def work(self):
                return "working"

            def eat(self):
                return "eating"

        with pytest.raises(TypeMismatchError) as exc_info:
            Feedable.check(Robot())
        assert "declared capabilities are Workable" in str(exc_info.value)

    def test_bind_returns_operation(self, payment):
        """Test that bind returns the bound operation."""
        class Cash:
            def make_payment(self, amount, note=None):
                return float(amount)

        operation = payment.bind(Cash())
        assert operation(10) == 10.0

    def test_declares_failure(self, payment):
        """Test declared failure kinds."""
        assert payment.declares_failure(UnsupportedOperationError("make_payment"))
        assert not payment.declares_failure(ValueError("boom"))


# =============================================================================
# Declaration Tests
# =============================================================================

class TestImplements:
    """Tests for the @implements decorator."""

    def test_declared_capabilities(self):
        """Test that the decorator records the declared set."""
        @implements(Workable, Feedable)
        class Human:
            def work(self):
                return "working"

            def eat(self):
                return "eating"

        assert declared_capabilities(Human) == {Workable, Feedable}
        assert declared_capabilities(Human()) == {Workable, Feedable}

    def test_undecorated_object_declares_nothing(self):
        """Test that plain objects have an empty declared set."""
        assert declared_capabilities(object()) == frozenset()

    def test_declarations_merge_with_bases(self):
        """Test that subclasses accumulate declarations."""
        @implements(Workable)
        class Robot:
            def work(self):
                return "working"

        @implements(Feedable)
        class Cyborg(Robot):
            def eat(self):
                return "refuelling"

        class Drone(Robot):
            pass

        assert declared_capabilities(Cyborg) == {Workable, Feedable}
        assert declared_capabilities(Drone) == {Workable}
        assert declared_capabilities(Robot) == {Workable}

    def test_missing_operation_rejected_at_decoration(self):
        """Test that a class cannot declare a capability it lacks."""
        with pytest.raises(TypeMismatchError) as exc_info:
            @implements(Feedable)
            class Robot:
                def work(self):
                    return "working"
        assert "Robot does not satisfy capability 'Feedable'" in str(exc_info.value)

    def test_empty_declaration_rejected(self):
        """Test that at least one capability is required."""
        with pytest.raises(InvalidCapabilityError):
            implements()

    def test_non_capability_rejected(self):
        """Test that only Capability objects can be declared."""
        with pytest.raises(InvalidCapabilityError):
            implements("Workable")  # type: ignore


# =============================================================================
# Result Verification Tests
# =============================================================================

class TestVerifyResult:
    """Tests for Capability.verify_result."""

    def test_valid_result_returned_unchanged(self):
        """Test that a valid result passes through."""
        assert Workable.verify_result(object(), "working") == "working"

    def test_wrong_return_type(self):
        """Test that a wrong return type is a contract violation."""
        with pytest.raises(ContractViolationError) as exc_info:
            Workable.verify_result(object(), 42)
        assert "P007" in str(exc_info.value)
        assert "expected str, got int" in str(exc_info.value)

    def test_postcondition_failure(self):
        """Test that a failed postcondition is a contract violation."""
        area = Capability(
            "Polygon",
            operation="area",
            returns=float,
            postcondition=lambda value: value >= 0,
        )
        assert area.verify_result(object(), 4.0) == 4.0
        with pytest.raises(ContractViolationError) as exc_info:
            area.verify_result(object(), -1.0)
        assert "postcondition failed" in str(exc_info.value)

    def test_unchecked_capability_accepts_anything(self):
        """Test that a capability without returns/postcondition checks nothing."""
        cap = Capability("Anything", operation="run")
        sentinel = object()
        assert cap.verify_result(object(), sentinel) is sentinel
