# routes -- API endpoints
#
#   public      -- home, offers, rates, search, newsletter, tools, sitemap
#   content     -- articles and news
#   forum       -- public forum
#   auth        -- login / register / password reset
#   admin       -- dashboard and catalogue management
#   admin_forum -- moderation
#   assist      -- AI content and news parser
