"""Property-based tests over generated modules."""
import pytest
from hypothesis import given, strategies as st

from xdrgen.compiler.pipeline import generate
from conftest import load_module

SOURCE = """
    enum Mode { READ = 1, WRITE = 2, APPEND = 4 };

    struct Request {
        Mode mode;
        unsigned hyper offset;
        string name<8>;
        opaque data<>;
        int *retries;
    };

    union Reply switch (int status) {
        case 0:
            Request echo;
        default:
            string reason<32>;
    };
"""

mod = load_module(generate(SOURCE), "xdrgen_test_properties")

requests = st.builds(
    mod.Request,
    mode=st.sampled_from(list(mod.Mode)),
    offset=st.integers(0, 2**64 - 1),
    name=st.text(st.characters(min_codepoint=32, max_codepoint=126), max_size=8),
    data=st.binary(max_size=64),
    retries=st.none() | st.integers(-2**31, 2**31 - 1),
)

replies = st.one_of(
    st.builds(mod.Reply, status=st.just(0), value=requests),
    st.builds(
        mod.Reply,
        status=st.integers(-2**31, 2**31 - 1).filter(bool),
        value=st.text(st.characters(min_codepoint=32, max_codepoint=126), max_size=32),
    ),
)


@given(requests)
def test_request_round_trip(request):
    data = request.to_xdr()
    assert len(data) % 4 == 0
    assert mod.Request.from_xdr(data) == request


@given(replies)
def test_reply_round_trip(reply):
    assert mod.Reply.from_xdr(reply.to_xdr()) == reply


@given(st.binary(max_size=48))
def test_arbitrary_bytes_decode_or_raise(data):
    try:
        mod.Reply.from_xdr(data)
    except mod.xdr.XdrError:
        pass


@pytest.mark.parametrize("name", ["123456789", "éééé5"])
def test_string_bound_counts_bytes(name):
    request = mod.Request(mod.Mode.READ, 0, name, b"", None)
    with pytest.raises(mod.xdr.BoundsError):
        request.to_xdr()
