import random

import discord
from discord import app_commands
from discord.ext import commands

from utils.logger import setup_logger

logger = setup_logger("RPS")

# What each choice beats
BEATS = {"rock": "scissors", "paper": "rock", "scissors": "paper"}
CHOICE_ICONS = {"rock": "🪨", "paper": "📜", "scissors": "✂️"}
NICE_CHOICE_EMOJIS = ["😎", "👍", "🎉", "🔥", "💪", "🤞"]

CHALLENGE_TIMEOUT = 600  # seconds


def get_result(challenger: dict, opponent: dict) -> str:
    """Announce the winner. Both players are {"id": user_id, "choice": "rock"|"paper"|"scissors"}."""
    if challenger["choice"] == opponent["choice"]:
        return f"<@{challenger['id']}> and <@{opponent['id']}> draw with **{challenger['choice']}** {CHOICE_ICONS[challenger['choice']]}"

    if BEATS[challenger["choice"]] == opponent["choice"]:
        winner, loser = challenger, opponent
    else:
        winner, loser = opponent, challenger
    return (
        f"<@{winner['id']}>'s **{winner['choice']}** {CHOICE_ICONS[winner['choice']]} beats "
        f"<@{loser['id']}>'s **{loser['choice']}** {CHOICE_ICONS[loser['choice']]}"
    )


def choice_options():
    options = [
        discord.SelectOption(label=choice.capitalize(), value=choice, emoji=CHOICE_ICONS[choice])
        for choice in BEATS
    ]
    random.shuffle(options)
    return options


class ChoiceSelect(discord.ui.Select):
    def __init__(self, cog: "RPS", game_id: int):
        super().__init__(placeholder="What is your object of choice?", options=choice_options())
        self.cog = cog
        self.game_id = game_id

    async def callback(self, interaction: discord.Interaction):
        game = self.cog.active_games.pop(self.game_id, None)
        if not game:
            return await interaction.response.edit_message(content="This challenge has expired.", view=None)

        result = get_result(game, {"id": interaction.user.id, "choice": self.values[0]})
        await interaction.response.edit_message(content=f"Nice choice {random.choice(NICE_CHOICE_EMOJIS)}", view=None)
        await interaction.followup.send(result)


class ChoiceView(discord.ui.View):
    """Ephemeral select shown to the player who accepted."""

    def __init__(self, cog: "RPS", game_id: int):
        super().__init__(timeout=CHALLENGE_TIMEOUT)
        self.cog = cog
        self.game_id = game_id
        self.add_item(ChoiceSelect(cog, game_id))

    async def on_timeout(self):
        # Opponent accepted but never picked
        self.cog.active_games.pop(self.game_id, None)


class ChallengeView(discord.ui.View):
    def __init__(self, cog: "RPS", game_id: int):
        super().__init__(timeout=CHALLENGE_TIMEOUT)
        self.cog = cog
        self.game_id = game_id

    async def on_timeout(self):
        self.cog.active_games.pop(self.game_id, None)

    @discord.ui.button(label="Accept", style=discord.ButtonStyle.primary)
    async def accept(self, interaction: discord.Interaction, button: discord.ui.Button):
        game = self.cog.active_games.get(self.game_id)
        if not game:
            return await interaction.response.send_message("This challenge has expired.", ephemeral=True)
        if interaction.user.id == game["id"]:
            return await interaction.response.send_message("You can't accept your own challenge.", ephemeral=True)
        if game.get("opponent_id"):
            return await interaction.response.send_message("Someone already accepted this challenge.", ephemeral=True)

        game["opponent_id"] = interaction.user.id
        await interaction.response.send_message(
            "What is your object of choice?", view=ChoiceView(self.cog, self.game_id), ephemeral=True
        )

        # Remove the challenge so nobody else can accept it
        self.stop()
        try:
            await interaction.message.delete()
        except discord.HTTPException as e:
            logger.warning(f"Could not delete challenge message: {e}")


class RPS(commands.Cog):
    def __init__(self, bot):
        self.bot = bot
        # In-progress games: {game_id: {"id": challenger_id, "choice": str, "opponent_id": int}}
        self.active_games = {}

    @commands.hybrid_command(name="challenge", aliases=["rps"])
    @app_commands.rename(choice="object")
    @app_commands.describe(choice="Pick your object")
    @app_commands.choices(choice=[app_commands.Choice(name=c.capitalize(), value=c) for c in BEATS])
    async def challenge(self, ctx, choice: str):
        """Challenge to a match of rock paper scissors."""
        choice = choice.lower()
        if choice not in BEATS:
            return await ctx.send(f"Use: {ctx.clean_prefix}challenge rock | paper | scissors")

        game_id = ctx.message.id
        self.active_games[game_id] = {"id": ctx.author.id, "choice": choice}
        await ctx.send(
            f"Rock paper scissors challenge from {ctx.author.mention}",
            view=ChallengeView(self, game_id),
        )


async def setup(bot):
    await bot.add_cog(RPS(bot))
