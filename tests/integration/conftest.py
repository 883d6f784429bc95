"""Fixtures for CLI and pipeline integration tests"""

import pytest


FONTS_MD = """\
---
title: Fonts
description: Register and consume custom fonts.
ms.date: 04/05/2022
---

# Fonts

## Register fonts

```csharp
builder.ConfigureFonts(fonts => { fonts.AddFont("OpenSans-Regular.ttf", "OpenSansRegular"); });
```

## Consume fonts

```xaml
<Label Text="Hello" FontFamily="OpenSansRegular" />
```
"""

COLORS_MD = """\
---
title: Colors
description: Legacy color mode on iOS.
ms.date: 2022-03-01
---

# Colors

Fonts are covered in [Fonts](fonts.md#register-fonts). Back to [home](../index.md).

:::image type="content" source="media/colors.png" alt-text="Colors.":::

[!INCLUDE [note](../includes/note.md)]
"""

INDEX_MD = """\
---
title: Home
description: Start here.
ms.date: 01/10/2022
---

# Home

- [Fonts](ios/fonts.md)
- [Colors](ios/colors.md)
"""

NOTE_MD = """\
---
title: Note
description: Shared note.
ms.date: 01/10/2022
---
> [!NOTE]
> Applies to iOS only.
"""


@pytest.fixture(name="workspace")
def workspace_fixture(tmp_path, monkeypatch):
    """Run from tmp_path with a file-backed database there."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DOCSITE_DB_URL", f"sqlite:///{tmp_path}/test.db")
    return tmp_path


@pytest.fixture(name="docs")
def docs_fixture(workspace):
    """docs/ with a root page, two ios pages, an image, and a shared include."""
    root = workspace / "docs"
    (root / "ios" / "media").mkdir(parents=True)
    (root / "includes").mkdir()
    (root / "index.md").write_text(INDEX_MD)
    (root / "ios" / "fonts.md").write_text(FONTS_MD)
    (root / "ios" / "colors.md").write_text(COLORS_MD)
    (root / "ios" / "media" / "colors.png").write_bytes(b"\x89PNG")
    (root / "includes" / "note.md").write_text(NOTE_MD)
    return root
