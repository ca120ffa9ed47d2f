"""
Export settings

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use VAULTPRESS_ prefix (e.g., VAULTPRESS_BLOG_PATH=posts).

Settings can also be loaded from a .env file in the project root. The model
is frozen: rules read it during a run but never change it.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExportSettings(BaseSettings):
    """
    Target configuration consulted by export rules.

    Environment variables use VAULTPRESS_ prefix.

    Examples:
        VAULTPRESS_EXPORT_PATH=/srv/hugo/content
        VAULTPRESS_IMAGE_EXPORT_PATH=img
        VAULTPRESS_DEFAULT_DISP_NAME_EN=index.en.md
    """

    model_config = SettingsConfigDict(
        env_prefix="VAULTPRESS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
    )

    # Locations
    export_path: str = Field(
        default="",
        description="Root of the static site's content directory",
    )

    image_export_path: str = Field(
        default="img",
        description="Subdirectory (relative to the article) that receives copied images",
    )

    blog_path: str = Field(
        default="posts",
        description="Section under the content root that holds articles",
    )

    # Per-locale file names
    default_export_name_zh_cn: str = Field(
        default="index.zh-cn",
        description="Export file name for Chinese articles; {{title}} is replaced by the note title",
    )

    default_export_name_en: str = Field(
        default="index.en",
        description="Export file name for English articles; {{title}} is replaced by the note title",
    )

    default_disp_name_zh_cn: str = Field(
        default="index.zh-cn.md",
        description="File imported by embed shortcodes in Chinese articles",
    )

    default_disp_name_en: str = Field(
        default="index.en.md",
        description="File imported by embed shortcodes in English articles",
    )

    # Rendering
    pygments_style: str = Field(
        default="monokai",
        description="Pygments style for highlighted code in HTML output",
    )

    def dispName_forLang(self, lang: str | None) -> str:
        """
        Default display file name for a locale.

        Args:
            lang: Article language ("en" selects English; anything else,
                  including None, selects Chinese)

        Example:
            >>> ExportSettings().dispName_forLang('en')
            'index.en.md'
        """
        if lang_isEnglish(lang):
            return self.default_disp_name_en
        return self.default_disp_name_zh_cn

    def exportName_forLang(self, lang: str | None, title: str = "") -> str:
        """
        Default export file name for a locale, with {{title}} substituted.

        Example:
            >>> ExportSettings(default_export_name_en='{{title}}.en').exportName_forLang('en', 'intro')
            'intro.en'
        """
        name = self.default_export_name_en if lang_isEnglish(lang) else self.default_export_name_zh_cn
        return name.replace("{{title}}", title)

    def imageDir_resolve(self, slug: str) -> Path:
        """Directory that receives an article's copied images"""
        return Path(self.export_path).resolve() / self.blog_path / slug / self.image_export_path


def lang_isEnglish(lang: str | None) -> bool:
    return (lang or "").strip().lower() == "en"


# Singleton instance - import this in your code
appsettings = ExportSettings()
