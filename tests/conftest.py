import pytest

from jsxcuro.core.engine import GenerationSession
from jsxcuro.healing.pipeline import HealingPipeline

HERO = '''function Hero({ title }) {
  const [open, setOpen] = useState(false);
  return (
    <section className="hero">
      <h1 style={{ color: "red" }}>{title}</h1>
      {open ? <Modal onClose={() => setOpen(false)} /> : null}
      <img src="/a.png" alt="A" />
    </section>
  );
}
'''

NAV = '''function Nav() {
  return (
    <nav aria-label="Main">
      <a href="/">Home</a>
    </nav>
  );
}
'''

HEADER = '''import { Nav } from "./Nav";

export default function Header() {
  return (
    <header className="p-4">
      <Nav />
    </header>
  );
}
'''

ROOT_LAYOUT = '''function RootLayout() {
  return (
    <div>
      <Header />
      <main>Hi</main>
    </div>
  );
}
'''

TRANSCRIPT = (
    "/// START Nav position=header\n" + NAV +
    "/// END Nav\n"
    "/// START Header position=header\n" + HEADER +
    "/// END Header\n"
    "/// START RootLayout\n" + ROOT_LAYOUT +
    "/// END RootLayout\n"
)


def artifact_events(artifact_id, name, text, position="main", chunk_size=None, stop=True):
    """start / delta... / stop events for one artifact."""
    events = [{"type": "start", "artifactId": artifact_id, "name": name, "position": position}]
    size = chunk_size or len(text) or 1
    for i in range(0, len(text), size):
        events.append({"type": "delta", "artifactId": artifact_id, "text": text[i:i + size]})
    if stop:
        events.append({"type": "stop", "artifactId": artifact_id})
    return events


@pytest.fixture
def pipeline():
    return HealingPipeline()


@pytest.fixture
def session():
    return GenerationSession(session_id="test")
