import asyncio
import random
import pytest

from streamflow.errors import ProviderError, UnknownSource
from streamflow.services.aggregator import SourceAggregator, merge_results


def test_merge_results_round_robin(make_track):
    a1, a2 = make_track("a1"), make_track("a2")
    b1 = make_track("b1", source="soundcloud")

    assert merge_results([[a1, a2], [b1], []]) == [a1, b1, a2]


def test_merge_results_empty():
    assert merge_results([]) == []
    assert merge_results([[], []]) == []


@pytest.mark.asyncio
async def test_search_skips_failing_provider(make_track, fake_provider):
    a = fake_provider("youtube", [make_track("a1"), make_track("a2")])
    b = fake_provider("soundcloud", [make_track("b1", "soundcloud")], fail=True)
    c = fake_provider("audius", [make_track("c1", "audius"), make_track("c2", "audius"), make_track("c3", "audius")])
    aggregator = SourceAggregator([a, b, c])

    results = await aggregator.search("query", "all")

    assert [t.id for t in results] == ["a1", "c1", "a2", "c2", "c3"]
    assert b.calls["search"] == 1


@pytest.mark.asyncio
async def test_search_all_providers_failing_returns_empty(fake_provider):
    aggregator = SourceAggregator([fake_provider("youtube", fail=True), fake_provider("audius", fail=True)])
    assert await aggregator.search("query") == []


@pytest.mark.asyncio
async def test_search_source_filter(make_track, fake_provider):
    a = fake_provider("youtube", [make_track("a1")])
    b = fake_provider("audius", [make_track("b1", "audius")])
    aggregator = SourceAggregator([a, b])

    results = await aggregator.search("query", "audius")

    assert [t.id for t in results] == ["b1"]
    assert a.calls["search"] == 0
    assert await aggregator.search("query", "nowhere") == []


@pytest.mark.asyncio
async def test_search_slow_provider_times_out(make_track, fake_provider):
    class SlowProvider(fake_provider):
        async def search(self, query):
            await asyncio.sleep(5)
            return [make_track("late")]

    fast = fake_provider("youtube", [make_track("a1")])
    aggregator = SourceAggregator([fast, SlowProvider("audius")], timeout=0.05)

    results = await aggregator.search("query")

    assert [t.id for t in results] == ["a1"]


def test_duplicate_provider_names_rejected(fake_provider):
    with pytest.raises(ValueError):
        SourceAggregator([fake_provider("youtube"), fake_provider("youtube")])


@pytest.mark.asyncio
async def test_trending_uses_only_trending_providers(make_track, fake_provider):
    yt = fake_provider("youtube", trending=[make_track(f"y{i}") for i in range(15)])
    sc = fake_provider("soundcloud")
    au = fake_provider("audius", trending=[make_track(f"a{i}", "audius") for i in range(15)])
    aggregator = SourceAggregator([yt, sc, au], rng=random.Random(7))

    trending = await aggregator.get_trending()

    assert len(trending) == 20
    assert len({t.key for t in trending}) == 20
    assert sc.calls["trending"] == 0


@pytest.mark.asyncio
async def test_trending_tolerates_failure(make_track, fake_provider):
    yt = fake_provider("youtube", trending=[make_track("y1")], fail=True)
    au = fake_provider("audius", trending=[make_track("a1", "audius"), make_track("a2", "audius")])
    aggregator = SourceAggregator([yt, au])

    trending = await aggregator.get_trending()

    assert sorted(t.id for t in trending) == ["a1", "a2"]


@pytest.mark.asyncio
async def test_stream_url_dispatches_by_source(make_track, fake_provider):
    yt = fake_provider("youtube", stream_url="https://cdn/yt")
    au = fake_provider("audius", stream_url="https://cdn/au")
    aggregator = SourceAggregator([yt, au])

    assert await aggregator.get_stream_url(make_track("x", "audius")) == "https://cdn/au"
    assert yt.calls["stream"] == 0


@pytest.mark.asyncio
async def test_stream_url_unknown_source(make_track, fake_provider):
    aggregator = SourceAggregator([fake_provider("youtube")])
    with pytest.raises(UnknownSource):
        await aggregator.get_stream_url(make_track("x", "bandcamp"))


@pytest.mark.asyncio
async def test_stream_url_falls_back_when_resolution_fails(make_track, fake_provider):
    yt = fake_provider("youtube", fail=True, fallback="https://www.youtube.com/embed/x?autoplay=1")
    aggregator = SourceAggregator([yt])

    url = await aggregator.get_stream_url(make_track("x"))

    assert url == "https://www.youtube.com/embed/x?autoplay=1"


@pytest.mark.asyncio
async def test_stream_url_failure_without_fallback_propagates(make_track, fake_provider):
    aggregator = SourceAggregator([fake_provider("audius", fail=True)])
    with pytest.raises(ProviderError):
        await aggregator.get_stream_url(make_track("x", "audius"))


@pytest.mark.asyncio
async def test_download_audio(make_track, fake_provider):
    aggregator = SourceAggregator([fake_provider("audius", stream_url="https://cdn/au", audio=b"\x00\x01")])
    assert await aggregator.download_audio(make_track("x", "audius")) == b"\x00\x01"


@pytest.mark.asyncio
async def test_discovery_lookups(make_track, fake_provider, fake_discovery):
    related = [make_track("r1"), make_track("r2", "audius")]
    discovery = fake_discovery(
        lyrics={"Hello": "Hello, it's me"},
        artists={"Adele": {"name": "Adele", "genre": "pop"}},
        recommendations=related
    )
    aggregator = SourceAggregator([fake_provider("youtube")], discovery=discovery)

    assert await aggregator.get_lyrics("Hello", "Adele") == "Hello, it's me"
    assert await aggregator.get_lyrics("Unknown", "Nobody") is None
    assert await aggregator.get_artist_info("Adele") == {"name": "Adele", "genre": "pop"}
    assert await aggregator.get_recommendations(make_track("x")) == related


@pytest.mark.asyncio
async def test_discovery_failures_are_contained(make_track, fake_provider, fake_discovery):
    aggregator = SourceAggregator([fake_provider("youtube")], discovery=fake_discovery(fail=True))

    assert await aggregator.get_lyrics("Hello", "Adele") is None
    assert await aggregator.get_artist_info("Adele") is None
    assert await aggregator.get_recommendations(make_track("x")) == []


@pytest.mark.asyncio
async def test_discovery_disabled(make_track, fake_provider):
    aggregator = SourceAggregator([fake_provider("youtube")])

    assert await aggregator.get_lyrics("Hello", "Adele") is None
    assert await aggregator.get_recommendations(make_track("x")) == []


def test_close_closes_discovery(fake_provider, fake_discovery):
    discovery = fake_discovery()
    SourceAggregator([fake_provider("youtube")], discovery=discovery).close()
    assert discovery.closed
