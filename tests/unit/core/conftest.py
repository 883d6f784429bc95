"""Shared fixtures for core unit tests"""

import pytest
from markdown_it import MarkdownIt


SAMPLE_MD = """\
---
title: Legacy color mode on iOS
description: Disable the legacy color mode on a supported view.
ms.date: 04/05/2022
no-loc: [Xamarin.Forms]
---

# Legacy color mode on iOS

Some views support a legacy color mode. See [fonts](fonts.md#register-fonts).

> [!NOTE]
> Legacy color mode is enabled by default.

## Consume the platform-specific

```xaml
<ContentPage xmlns:ios="clr-namespace:Xamarin.Forms.PlatformConfiguration.iOSSpecific;assembly=Xamarin.Forms.Core">
    <Button Text="Button" ios:VisualElement.IsLegacyColorModeEnabled="False" />
</ContentPage>
```

```csharp
_legacyColorModeDisabledButton.On<iOS>().SetIsLegacyColorModeEnabled(false);
```

:::image type="content" source="media/legacy-color-mode.png" alt-text="Legacy color mode disabled.":::

[!INCLUDE [ios-note](includes/ios-note.md)]
"""

INCLUDE_MD = """\
---
title: iOS note
description: Shared note for iOS pages.
ms.date: 04/05/2022
ms.topic: include
---
Applies to **iOS** only.
"""

FONTS_MD = """\
---
title: Fonts
description: Register and consume fonts.
ms.date: 2022-03-01
---

# Fonts

## Register fonts

Fonts are registered in MauiProgram.
"""


@pytest.fixture(name="parser")
def parser_fixture():
    return MarkdownIt("gfm-like", options_update={"linkify": False})


@pytest.fixture(name="doc_tree")
def doc_tree_fixture(tmp_path):
    """A small docs root: ios/legacy-color-mode.md linking to a sibling page, image, and include."""
    root = tmp_path / "docs"
    (root / "ios" / "media").mkdir(parents=True)
    (root / "ios" / "includes").mkdir()
    (root / "ios" / "legacy-color-mode.md").write_text(SAMPLE_MD)
    (root / "ios" / "fonts.md").write_text(FONTS_MD)
    (root / "ios" / "media" / "legacy-color-mode.png").write_bytes(b"\x89PNG")
    (root / "ios" / "includes" / "ios-note.md").write_text(INCLUDE_MD)
    return root
