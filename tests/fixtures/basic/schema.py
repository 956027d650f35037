from convex.server import define_schema, define_table
from convex.values import v

# Shared validators (for typed returns)

game_status = v.union(
    v.literal("active"),
    v.literal("finished"),
    v.literal("abandoned"),
)

game_doc = v.object({
    "_id": v.id("games"),
    "_creationTime": v.number(),
    "win_count": v.number(),
    "loss_count": v.number(),
    "status": game_status,
    "lastPlayedAt": v.optional(v.number()),
})

player_settings = v.object(
    theme=v.union(v.literal("light"), v.literal("dark")),
    notifications=v.boolean(),
)

player_doc = v.object({
    "_id": v.id("players"),
    "_creationTime": v.number(),
    "name": v.string(),
    "score": v.number(),
    "isActive": v.boolean(),
    "profile": v.object({
        "bio": v.optional(v.string()),
        "avatar": v.optional(v.string()),
        "settings": player_settings,
    }),
    "rank": v.union(
        v.literal("bronze"),
        v.literal("silver"),
        v.literal("gold"),
        v.literal("platinum"),
    ),
    "achievements": v.array(v.object({
        "name": v.string(),
        "unlockedAt": v.number(),
    })),
    "stats": v.record(v.string(), v.number()),
})

schema = define_schema({
    "games": define_table({
        "win_count": v.number(),
        "loss_count": v.number(),
        "status": game_status,
        "lastPlayedAt": v.optional(v.number()),
    }),

    "players": define_table({
        "name": v.string(),
        "score": v.number(),
        "isActive": v.boolean(),
        "profile": v.object({
            "bio": v.optional(v.string()),
            "avatar": v.optional(v.string()),
            "settings": player_settings,
        }),
        "rank": v.union(
            v.literal("bronze"),
            v.literal("silver"),
            v.literal("gold"),
            v.literal("platinum"),
        ),
        "achievements": v.array(v.object({
            "name": v.string(),
            "unlockedAt": v.number(),
        })),
        "stats": v.record(v.string(), v.number()),
    })
    .index("by_rank", ["rank"])
    .index("by_isActive", ["isActive"]),

    # Every data type and variant
    "test": define_table(v.object({
        "testId": v.id("test"),
        "nullField": v.null(),
        "bigNum": v.int64(),
        "score": v.number(),
        "isActive": v.boolean(),
        "label": v.string(),
        "rawData": v.bytes(),
        "simpleTags": v.array(v.string()),
        "nestedArray": v.array(v.array(v.string())),
        "stringRecord": v.record(v.string(), v.string()),
        "mixedUnion": v.union(v.string(), v.number()),
        "taggedUnion": v.union(
            v.object({"type": v.literal("click"), "x": v.number(), "y": v.number()}),
            v.object({"type": v.literal("scroll"), "delta": v.number()}),
            v.object({"type": v.literal("keypress")}),
        ),
        "optionalObject": v.optional(v.object({"theme": v.string()})),
        "nullable": v.union(v.string(), v.null()),
        "anything": v.any(),
    })).search_index("search_label", {"searchField": "label"}),
})
