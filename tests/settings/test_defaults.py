import aiolinode


async def test_declared_public_interface_and_promised_defaults():
    settings = aiolinode.ClientSettings()
    assert settings.networking.request_timeout == 300
    assert settings.networking.connect_timeout is None
    assert settings.networking.error_backoffs == (1, 2, 4)
    assert settings.networking.retry_max_wait == 30
    assert settings.polling.interval == 3
    assert settings.caching.enabled == True
    assert settings.caching.expiry == 900
    assert settings.user_agent.startswith('aiolinode/')
    assert settings.debug == False


async def test_settings_are_independent():
    settings1 = aiolinode.ClientSettings()
    settings2 = aiolinode.ClientSettings()
    settings1.networking.error_backoffs = []
    settings1.polling.interval = 1
    settings1.caching.enabled = False
    assert settings2.networking.error_backoffs == (1, 2, 4)
    assert settings2.polling.interval == 3
    assert settings2.caching.enabled == True
