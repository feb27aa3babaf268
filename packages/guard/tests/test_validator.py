"""Tests for the Validator chain."""

import asyncio
import gc
import inspect
import warnings

import pytest

from dataknobs_guard import (
    MISSING,
    AsyncValidatorError,
    Guard,
    SchemaError,
    ValidationError,
    Validator,
    compile_schema,
)


def _increment(value):
    return value + 1


def _double(value):
    return value * 2


async def _async_double(value):
    await asyncio.sleep(0)
    return value * 2


class TestCall:
    """Test calling validators."""

    def test_identity(self):
        """Test the base validator returns its input."""
        validator = Validator.create()
        assert validator(5) == 5
        assert validator.call("a") == "a"

    def test_no_arguments_is_missing(self):
        """Test calling without arguments validates MISSING."""
        assert Validator.create().call() is MISSING

    def test_as_function(self):
        """Test the plain-function form."""
        check = Guard.number().min(0).as_function()
        assert check(3) == 3
        with pytest.raises(ValidationError):
            check(-1)

    def test_extra_arguments_reach_step(self):
        """Test extra call arguments are passed to the step."""
        validator = Validator(lambda value, factor: value * factor)
        assert validator(2, 5) == 10

    def test_from_function_promotes_errors(self):
        """Test plain exceptions in custom steps become ValidationErrors."""

        def _parse(value):
            return int(value)

        validator = Validator.from_function(_parse)
        assert validator("12") == 12
        with pytest.raises(ValidationError) as exc_info:
            validator("abc")
        assert exc_info.value.comparison == "custom"
        assert exc_info.value.got == "abc"
        assert "invalid literal" in exc_info.value.message


class TestTransform:
    """Test transform composition."""

    def test_sync_chain_stays_sync(self):
        """Test no deferral is introduced by synchronous steps."""
        result = Validator.create().transform(_increment).transform(_double)(1)
        assert not inspect.isawaitable(result)
        assert result == 4

    def test_associativity(self):
        """Test chained transforms equal a composed transform."""
        chained = Guard.number().transform(_increment).transform(_double)
        composed = Guard.number().transform(lambda x: _double(_increment(x)))
        for value in (0, 1, -3, 2.5, "7"):
            assert chained(value) == composed(value)

    def test_immutability(self):
        """Test chaining never mutates the original validator."""
        base = Guard.string()
        short = base.max_length(1)
        long = base.min_length(3)

        assert base("ab") == "ab"
        with pytest.raises(ValidationError):
            short("ab")
        with pytest.raises(ValidationError):
            long("ab")
        assert short("a") == "a"
        assert long("abc") == "abc"

    def test_transform_errors_are_promoted(self):
        """Test exceptions raised by transform functions become ValidationErrors."""
        validator = Validator.create().transform(lambda value: 1 / value)
        with pytest.raises(ValidationError) as exc_info:
            validator(0)
        assert exc_info.value.comparison == "transform"

    def test_transform_keeps_subclass(self):
        """Test chain methods return the same validator class."""
        assert type(Guard.string().trim()) is type(Guard.string())

    @pytest.mark.asyncio
    async def test_async_transform_defers(self):
        """Test a deferred transform makes the whole call deferred."""
        validator = Validator.create().transform(_async_double).transform(_increment)
        result = validator(3)
        assert inspect.isawaitable(result)
        assert await result == 7

    @pytest.mark.asyncio
    async def test_async_transform_errors_are_promoted(self):
        """Test exceptions raised when awaited are promoted too."""

        async def _fail(value):
            raise RuntimeError("lookup failed")

        with pytest.raises(ValidationError, match="lookup failed"):
            await Validator.create().transform(_fail)(1)


class TestTest:
    """Test predicate checks."""

    def test_passes_value_through(self):
        """Test a passing predicate leaves the value unchanged."""
        assert Validator.create().test(lambda v: v > 0)(5) == 5

    def test_failure(self):
        """Test a failing predicate raises with comparison test."""
        with pytest.raises(ValidationError) as exc_info:
            Validator.create().test(lambda v: v > 0)(-1)
        error = exc_info.value
        assert error.comparison == "test"
        assert error.got == -1
        assert error.message == "Unexpected value: -1"

    def test_custom_message(self):
        """Test message templates on test()."""
        validator = Validator.create().test(lambda v: v > 0, "Must be positive, got ${got}")
        with pytest.raises(ValidationError, match="Must be positive, got -2"):
            validator(-2)

    @pytest.mark.asyncio
    async def test_async_predicate(self):
        """Test predicates may be deferred."""

        async def _is_even(value):
            await asyncio.sleep(0)
            return value % 2 == 0

        validator = Guard.integer().test(_is_even)
        assert await validator(4) == 4
        with pytest.raises(ValidationError):
            await validator(3)


class TestEquality:
    """Test equals/not_equals with strict equality."""

    def test_equals(self):
        """Test equals passes and fails."""
        validator = Validator.create().equals(5)
        assert validator(5) == 5
        with pytest.raises(ValidationError) as exc_info:
            validator(6)
        assert exc_info.value.comparison == "equals"
        assert exc_info.value.message == "Expected value to be 5, but got 6"

    def test_not_equals(self):
        """Test not_equals renders the negated message."""
        with pytest.raises(ValidationError) as exc_info:
            Validator.create().not_equals(5)(5)
        assert exc_info.value.comparison == "notEquals"
        assert exc_info.value.message == "Expected value not to be 5, but got 5"

    def test_no_cross_type_coercion(self):
        """Test strict equality rules."""
        assert Validator.create().equals(1)(1.0) == 1.0
        with pytest.raises(ValidationError):
            Validator.create().equals(1)(True)
        with pytest.raises(ValidationError):
            Validator.create().equals("1")(1)
        with pytest.raises(ValidationError):
            Validator.create().equals(None)(MISSING)


class TestMembership:
    """Test is_in/not_in."""

    def test_is_in(self):
        """Test membership passes and fails."""
        validator = Validator.create().is_in([1, 2])
        assert validator(2) == 2
        with pytest.raises(ValidationError) as exc_info:
            validator(3)
        assert exc_info.value.comparison == "in"
        assert exc_info.value.message == "Expected value to be in (1, 2), but got 3"

    def test_one_of_alias(self):
        """Test one_of is is_in."""
        assert Validator.create().one_of(["a", "b"])("a") == "a"

    def test_not_in(self):
        """Test negative membership."""
        validator = Guard.string().not_in(["admin", "root"])
        assert validator("alice") == "alice"
        with pytest.raises(ValidationError) as exc_info:
            validator("root")
        assert exc_info.value.comparison == "notIn"
        assert exc_info.value.message == "Expected value not to be in (admin, root), but got root"

    def test_duplicates_are_removed(self):
        """Test candidate de-duplication."""
        with pytest.raises(ValidationError) as exc_info:
            Validator.create().is_in([1, 1, 2])(3)
        assert exc_info.value.expected == [1, 2]

    def test_membership_is_strict(self):
        """Test membership uses strict equality."""
        with pytest.raises(ValidationError):
            Validator.create().is_in([1, 2])(True)

    @pytest.mark.parametrize("values", [[], [None], [None, MISSING], "ab", 5])
    def test_invalid_candidates(self, values):
        """Test empty or null-only lists are setup errors."""
        with pytest.raises(SchemaError, match='Argument "values" must be a non-empty list'):
            Validator.create().is_in(values)


class TestOptional:
    """Test optional values and defaults."""

    def test_null_and_missing_pass_through(self):
        """Test nullish input is returned without running the wrapped step."""
        validator = Guard.string().optional()
        assert validator(None) is None
        assert validator(MISSING) is MISSING
        assert validator.call() is MISSING
        assert validator("a") == "a"

    def test_present_value_is_still_validated(self):
        """Test non-null input still fails normally."""
        with pytest.raises(ValidationError) as exc_info:
            Guard.string().optional()(5)
        assert exc_info.value.comparison == "type"

    def test_default_value(self):
        """Test the default replaces a nullish input."""
        validator = Guard.string().trim().optional("  x ")
        assert validator(None) == "x"
        assert validator(MISSING) == "x"
        assert validator(" y ") == "y"

    def test_default_generator(self):
        """Test callable defaults are invoked."""
        calls = []

        def _generate():
            calls.append(1)
            return 10

        validator = Guard.integer().optional(_generate)
        assert validator(None) == 10
        assert validator(3) == 3
        assert len(calls) == 1

    def test_null_default_skips_validation(self):
        """Test a default resolving to null is returned directly."""
        assert Guard.string().optional(lambda: None)(MISSING) is None

    def test_invalid_default(self):
        """Test a default that fails validation is wrapped."""
        with pytest.raises(ValidationError) as exc_info:
            Guard.string().optional(5)(None)
        error = exc_info.value
        assert error.comparison == "optional"
        assert error.message == "Default value 5 failed validation"
        assert error.children[0].comparison == "type"

    def test_failing_generator(self):
        """Test errors while producing the default are wrapped."""

        def _generate():
            raise RuntimeError("boom")

        with pytest.raises(ValidationError) as exc_info:
            Guard.string().optional(_generate)(None)
        assert exc_info.value.comparison == "optional"
        assert exc_info.value.message == "Error generating default value: boom"

    @pytest.mark.asyncio
    async def test_async_generator(self):
        """Test deferred defaults make the call deferred."""

        async def _generate():
            await asyncio.sleep(0)
            return "generated"

        result = Guard.string().upper().optional(_generate)(None)
        assert inspect.isawaitable(result)
        assert await result == "GENERATED"

    @pytest.mark.asyncio
    async def test_async_generator_failure(self):
        """Test deferred default errors are wrapped."""

        async def _generate():
            raise RuntimeError("unavailable")

        with pytest.raises(ValidationError, match="Error generating default value: unavailable"):
            await Guard.string().optional(_generate)(None)


class TestSafeCall:
    """Test non-raising calls."""

    def test_success(self):
        """Test a valid input."""
        error, value = Guard.number().safe_call("12")
        assert error is None
        assert value == 12

    def test_failure(self):
        """Test an invalid input."""
        error, value = Guard.number().safe_call("abc")
        assert isinstance(error, ValidationError)
        assert error.comparison == "type"
        assert value is MISSING

    def test_validate_alias(self):
        """Test validate is safe_call."""
        assert Guard.string().validate("a").valid

    def test_async_validator_is_rejected(self):
        """Test safe_call refuses deferred validators."""

        async def _step(value):
            return value

        with pytest.raises(AsyncValidatorError):
            Validator(_step).safe_call(1)

    def test_async_error_is_not_a_validation_error(self):
        """Test the misuse error cannot be mistaken for bad input."""
        assert not issubclass(AsyncValidatorError, ValidationError)

    @pytest.mark.asyncio
    async def test_safe_call_async(self):
        """Test the awaitable variant accepts any validator."""
        validator = Validator.create().transform(_async_double).test(lambda v: v < 10)
        error, value = await validator.safe_call_async(2)
        assert error is None
        assert value == 4

        error, value = await validator.safe_call_async(20)
        assert isinstance(error, ValidationError)
        assert value is MISSING

        error, value = await Guard.string().safe_call_async("sync")
        assert (error, value) == (None, "sync")

    def test_async_struct_field_is_closed(self):
        """Test rejecting a deferred struct leaves no coroutine un-awaited."""
        validator = compile_schema({"a": _async_double, "b": Guard.string().transform(_async_double)})
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            with pytest.raises(AsyncValidatorError):
                validator.safe_call({"a": 1, "b": "x"})
            gc.collect()
        assert not [w for w in caught if "never awaited" in str(w.message)]

    def test_async_union_is_closed(self):
        """Test rejecting a deferred union closes the alternative it started."""
        validator = Guard.union([Validator.create().transform(_async_double), Guard.string()])
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            with pytest.raises(AsyncValidatorError):
                validator.safe_call(2)
            gc.collect()
        assert not [w for w in caught if "never awaited" in str(w.message)]


class TestUnrenderableValues:
    """Test inputs whose display form cannot be JSON-encoded still fail as validation errors."""

    def test_tuple_keyed_mapping(self):
        """Test a mapping with tuple keys is reported, not crashed on."""
        with pytest.raises(ValidationError) as exc_info:
            Guard.string()({(1, 2): "x"})
        assert exc_info.value.comparison == "type"

    def test_safe_call_returns_error(self):
        """Test safe_call keeps its non-raising contract for such inputs."""
        error, value = Guard.number().safe_call({(1, 2): "x"})
        assert isinstance(error, ValidationError)
        assert value is MISSING

    def test_struct_field(self):
        """Test a struct reports the field holding such a value."""
        with pytest.raises(ValidationError) as exc_info:
            compile_schema({"a": str})({"a": {(1, 2): 3}})
        assert [child.key for child in exc_info.value.children] == ["a"]

    def test_circular_values(self):
        """Test self-referencing mappings and lists are reported."""
        cyclic = {}
        cyclic["me"] = cyclic
        with pytest.raises(ValidationError):
            Guard.string()(cyclic)

        items = []
        items.append(items)
        error, value = Guard.number().safe_call(items)
        assert isinstance(error, ValidationError)
        assert value is MISSING
