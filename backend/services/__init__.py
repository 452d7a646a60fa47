# services -- domain operations over the content store
#
# Modules:
#   taxonomy   -- categories and the category/type partition rule
#   offers     -- partner products, featured selection
#   content    -- articles and news (slugs, views, featured split)
#   forum      -- topics, posts and the moderation gate
#   rates      -- currency rates with display defaults
#   newsletter -- subscriptions
#   search     -- live search over offers and articles
#   tools      -- credit calculator and credit rating
#   seo        -- sitemap and IndexNow ping
#   dashboard  -- admin statistics and demo data
