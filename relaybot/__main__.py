"""Entry point: python -m relaybot"""

from relaybot.adapters.discord.launcher import main

if __name__ == "__main__":
    main()
