import logging
from typing import Any

import discord
from discord import Interaction, app_commands
from discord.ext import commands

from campus_badges.badges import service
from campus_badges.badges.errors import BadgeError
from campus_badges.utils.constants import EMBED_FIELD_LIMIT

logger = logging.getLogger(__name__)


def chunk_lines(lines: list[str], max_len: int = EMBED_FIELD_LIMIT) -> list[str]:
    '''Group lines into blocks that fit in one embed field.'''
    chunks: list[str] = []
    cur: list[str] = []
    cur_len = 0
    for ln in lines:
        add_len = len(ln) + 1
        if cur_len + add_len > max_len and cur:
            chunks.append('\n'.join(cur))
            cur = []
            cur_len = 0
        cur.append(ln)
        cur_len += add_len
    if cur:
        chunks.append('\n'.join(cur))
    return chunks


def earned_line(record: dict[str, Any]) -> str:
    badge = record.get('badge') or {}
    earned_at = record.get('earned_at')
    when = f' • {earned_at.date().isoformat()}' if hasattr(earned_at, 'date') else ''
    return f'🏆 {badge.get("name", "Unknown")} ({badge.get("rarity", "?")}){when}'


def progress_line(badge: dict[str, Any], progress: Any) -> str:
    if progress is None:
        return f'🔒 {badge["name"]} (progress unavailable)\n_{badge["description"]}_'
    return (
        f'🔒 {badge["name"]} {progress.current}/{progress.target} '
        f'({progress.percentage:.0f}%)\n_{badge["description"]}_'
    )


def add_block_fields(embed: discord.Embed, title: str, lines: list[str]) -> None:
    if not lines:
        embed.add_field(name=title, value='Nothing here yet.', inline=False)
        return
    for idx, block in enumerate(chunk_lines(lines), start=1):
        embed.add_field(
            name=(title if idx == 1 else f'{title} (cont.)'), value=block, inline=False
        )


class BadgesCog(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @app_commands.command(name='badges', description='View your campus badges')
    @app_commands.choices(
        show=[
            app_commands.Choice(name='Earned', value='earned'),
            app_commands.Choice(name='Available', value='available'),
            app_commands.Choice(name='Progress', value='progress'),
            app_commands.Choice(name='Stats', value='stats'),
        ]
    )
    async def badges(
        self,
        interaction: Interaction,
        show: app_commands.Choice[str] | None = None,
    ):
        await interaction.response.defer(thinking=True, ephemeral=True)
        user_id = str(interaction.user.id)
        mode = (show.value if show else 'earned').lower()

        embed = discord.Embed(
            title=f'Badges for {interaction.user.display_name}',
            color=discord.Color.gold(),
        )
        try:
            if mode == 'available':
                lines = [
                    f'🔒 {b["name"]} ({b["rarity"]})\n_{b["description"]}_'
                    for b in service.get_available(user_id)
                ]
                add_block_fields(embed, 'Available', lines)
            elif mode == 'progress':
                view = service.get_progress(user_id)
                lines = [
                    progress_line(item['badge'], item['progress'])
                    for item in view['progress']
                ]
                add_block_fields(embed, 'In progress', lines)
            elif mode == 'stats':
                stats = service.get_stats(user_id)
                embed.description = (
                    f'**{stats["earned_badges"]}** of '
                    f'**{stats["total_badges"]}** badges earned'
                )
                breakdown = '\n'.join(
                    f'{category.title()}: {cnt}'
                    for category, cnt in stats['category_breakdown'].items()
                )
                embed.add_field(name='By category', value=breakdown, inline=False)
                add_block_fields(
                    embed, 'Recent', [earned_line(r) for r in stats['recent_badges']]
                )
            else:
                add_block_fields(
                    embed,
                    'Earned',
                    [earned_line(r) for r in service.get_earned(user_id)],
                )
        except BadgeError as e:
            logger.error(f'Failed to build /badges view for {user_id}', exc_info=True)
            await interaction.followup.send(f'⚠️ {e.message}', ephemeral=True)
            return

        await interaction.followup.send(embed=embed, ephemeral=True)

    @app_commands.command(
        name='award_badge', description='Admin-only command to award a badge.'
    )
    @app_commands.checks.has_permissions(administrator=True)
    async def award_badge(
        self, interaction: Interaction, member: discord.Member, badge_name: str
    ):
        '''Admin-only command to award a badge by name.'''
        try:
            badge = service.find_by_name(badge_name)
            service.assign(str(member.id), badge['id'])
        except BadgeError as e:
            await interaction.response.send_message(f'❌ {e.message}', ephemeral=True)
            return
        await interaction.response.send_message(
            f'✅ {member.display_name} now holds {badge["name"]}.', ephemeral=True
        )


async def setup(bot: commands.Bot):
    await bot.add_cog(BadgesCog(bot))
